from datetime import datetime
from typing import Optional

import attrs


@attrs.define(frozen=True)
class ScannerKey:
    """Event-scoped bearer credential for door scanners."""

    id: str
    event_id: str
    label: Optional[str] = None
    active: bool = True
    expires_at: Optional[datetime] = None
