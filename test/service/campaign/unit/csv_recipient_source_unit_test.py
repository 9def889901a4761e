from pathlib import Path

import pytest

from src.platform.exception.exceptions import DomainError
from src.service.campaign.driven_adapter.csv_recipient_source import (
    parse_recipient_rows,
    read_recipient_csv,
)


@pytest.mark.unit
class TestReadRecipientCsv:
    def test_google_forms_export_in_icelandic(self, tmp_path: Path) -> None:
        csv_path = tmp_path / 'responses.csv'
        csv_path.write_text(
            '\ufeffTimestamp,Email Address,Fullt nafn,HÍ email,'
            'Hvernig miða ætlar þú að kaupa?,Greiðsla komin?\n'
            '2026/01/10,private@gmail.com,Jón Jónsson,jon1@hi.is,Mat og ball,Já\n'
            '2026/01/11,,"Guðrún, Ósk",,Bara ball,Nei\n',
            encoding='utf-8',
        )

        rows = read_recipient_csv(csv_path)

        assert len(rows) == 2
        first, second = rows
        # school email is preferred over the form's contact email
        assert first.email == 'jon1@hi.is'
        assert first.name == 'Jón Jónsson'
        assert first.type_text == 'Mat og ball'
        assert first.paid == 'Já'
        assert first.row_number == 1
        assert second.email == ''
        assert second.name == 'Guðrún, Ósk'
        assert second.paid == 'Nei'

    def test_english_export_with_type_id_column(self) -> None:
        rows = parse_recipient_rows(
            [
                ['email', 'name', 'ticketTypeId'],
                ['a@example.is', '', '5F0E2A8C-3B1D-4C6E-8F7A-9B0C1D2E3F40'],
                ['', '', ''],
            ]
        )

        assert len(rows) == 1
        assert rows[0].name is None
        assert rows[0].ticket_type_id == '5F0E2A8C-3B1D-4C6E-8F7A-9B0C1D2E3F40'
        # no payment column at all
        assert rows[0].paid is None

    def test_greidsla_komin_wins_over_buin_ad_borga(self) -> None:
        rows = parse_recipient_rows(
            [
                ['Email', 'Type', 'Búin að borga?', 'Greiðsla komin?'],
                ['a@example.is', 'Ball', 'Já', 'Nei'],
            ]
        )

        assert rows[0].paid == 'Nei'

    def test_short_rows_read_as_empty_cells(self) -> None:
        rows = parse_recipient_rows([['email', 'name', 'type'], ['a@example.is']])

        assert rows[0].name is None
        assert rows[0].type_text is None

    @pytest.mark.parametrize(
        ('lines', 'message'),
        [
            ([['email', 'type']], 'header row and at least one data row'),
            ([['name', 'type'], ['x', 'y']], 'missing required column: email'),
            ([['email', 'name'], ['a@example.is', 'A']], 'ticketTypeId'),
        ],
    )
    def test_rejects_unusable_exports(self, lines: list[list[str]], message: str) -> None:
        with pytest.raises(DomainError, match=message):
            parse_recipient_rows(lines)
