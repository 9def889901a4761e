from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from src.service.admission.domain.entity.scanner_key_entity import ScannerKey


class IScannerKeyQueryRepo(ABC):
    @abstractmethod
    async def get_usable_by_hash(self, *, key_hash: str, now: datetime) -> Optional[ScannerKey]:
        """Active key with this digest whose expiry (if any) is after `now`."""
