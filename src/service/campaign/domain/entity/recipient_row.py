from typing import Optional

import attrs


@attrs.define
class RecipientRow:
    """One data row of a recipient export, values trimmed but not validated."""

    row_number: int
    email: str
    name: Optional[str] = None
    type_text: Optional[str] = None
    ticket_type_id: Optional[str] = None
    # None when the export has no payment column
    paid: Optional[str] = None
