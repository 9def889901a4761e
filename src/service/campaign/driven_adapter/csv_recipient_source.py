"""
Read recipient rows from a spreadsheet CSV export.

Headers are matched after `normalize_header`, so Google Forms exports in
Icelandic ("HÍ email", "Fullt nafn", "Greiðsla komin?") and plain English
exports ("email", "name", "ticket_type") both work.
"""

import csv
from pathlib import Path
from typing import List, Optional, Sequence, Union

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.campaign.domain.entity.recipient_row import RecipientRow
from src.service.campaign.domain.ticket_type_resolver import normalize_header


# First non-empty value wins; forms often carry both a school and a contact email
EMAIL_COLUMNS = ('hi_email', 'email_address', 'email')
NAME_COLUMNS = ('name', 'fullt_nafn', 'full_name')
TYPE_COLUMNS = ('ticket_type', 'tickettype', 'type', 'hvernig_mida_aetlar_thu_ad_kaupa')
TYPE_ID_COLUMN = 'tickettypeid'
# Later entries take precedence
PAID_COLUMNS = ('buin_ad_borga', 'greidsla_komin')


def _indexes(header: Sequence[str], names: Sequence[str]) -> List[int]:
    return [header.index(name) for name in names if name in header]


def _cell(row: Sequence[str], index: Optional[int]) -> str:
    if index is None or index >= len(row):
        return ''
    return row[index].strip()


def parse_recipient_rows(lines: List[List[str]]) -> List[RecipientRow]:
    if len(lines) < 2:
        raise DomainError('CSV must include a header row and at least one data row')

    header = [normalize_header(h) for h in lines[0]]
    email_indexes = _indexes(header, EMAIL_COLUMNS)
    if not email_indexes:
        raise DomainError('CSV is missing required column: email')

    type_indexes = _indexes(header, TYPE_COLUMNS)
    type_id_index = header.index(TYPE_ID_COLUMN) if TYPE_ID_COLUMN in header else None
    if not type_indexes and type_id_index is None:
        raise DomainError('CSV must include either ticketTypeId or a ticket type column')

    name_indexes = _indexes(header, NAME_COLUMNS)
    paid_indexes = _indexes(header, PAID_COLUMNS)
    name_index = name_indexes[0] if name_indexes else None
    type_index = type_indexes[0] if type_indexes else None
    paid_index = paid_indexes[-1] if paid_indexes else None

    rows: List[RecipientRow] = []
    for row_number, line in enumerate(lines[1:], start=1):
        if not any(cell.strip() for cell in line):
            continue
        email = next((_cell(line, i) for i in email_indexes if _cell(line, i)), '')
        rows.append(
            RecipientRow(
                row_number=row_number,
                email=email,
                name=_cell(line, name_index) or None,
                type_text=_cell(line, type_index) or None,
                ticket_type_id=_cell(line, type_id_index) or None,
                paid=_cell(line, paid_index) if paid_index is not None else None,
            )
        )
    return rows


def read_recipient_csv(path: Union[str, Path]) -> List[RecipientRow]:
    # utf-8-sig drops the BOM that spreadsheet exports prepend
    with Path(path).open(newline='', encoding='utf-8-sig') as f:
        lines = list(csv.reader(f))
    rows = parse_recipient_rows(lines)
    Logger.base.info(f'📄 [CSV] {len(rows)} recipient rows read from {path}')
    return rows
