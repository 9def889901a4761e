"""
Unit tests for the ticket token codec

Covers:
1. Extraction from noisy scanner/human input (URLs, encodings, invisible chars)
2. Strict validation of the canonical shape
3. Idempotence of extraction
"""

import pytest

from src.service.shared_kernel.domain.value_object.ticket_token import (
    extract_token,
    is_valid_token,
    new_token,
)


TOKEN = '0b6f7c3e-6a59-4a8e-9d3b-5a2f1f0c9e11'


@pytest.mark.unit
class TestExtractToken:
    @pytest.mark.parametrize(
        'raw',
        [
            TOKEN,
            TOKEN.upper(),
            f'  {TOKEN}\n',
            f'https://tickets.example.is/t/{TOKEN}',
            f'https://tickets.example.is/t/{TOKEN}?utm_source=mail',
            TOKEN.replace('-', '%2D'),
            TOKEN.replace('-', '%252D'),
            f'\u200b{TOKEN}\ufeff',
            TOKEN[:8] + '\u00ad' + TOKEN[8:],
            TOKEN.replace('-', '\u2013'),
            TOKEN.replace('-', '\u2212'),
            TOKEN.replace('-', '\uff0d'),
        ],
    )
    def test_recovers_canonical_token(self, raw: str) -> None:
        assert extract_token(raw) == TOKEN

    def test_fullwidth_digits_are_normalized(self) -> None:
        # NFKC maps FULLWIDTH DIGIT ZERO to '0'
        raw = '\uff10' + TOKEN[1:]

        assert extract_token(raw) == TOKEN

    @pytest.mark.parametrize(
        'raw',
        [
            None,
            '',
            '   ',
            'not-a-ticket',
            # version nibble 0 is outside 1-8
            '0b6f7c3e-6a59-0a8e-9d3b-5a2f1f0c9e11',
            # variant nibble c is outside 8-b
            '0b6f7c3e-6a59-4a8e-cd3b-5a2f1f0c9e11',
            TOKEN.replace('-', ''),
        ],
    )
    def test_returns_none_when_no_token(self, raw: str | None) -> None:
        assert extract_token(raw) is None

    def test_first_token_wins(self) -> None:
        other = new_token()

        assert extract_token(f'{TOKEN} {other}') == TOKEN

    @pytest.mark.parametrize(
        'raw',
        [TOKEN.upper(), f'see /t/{TOKEN}', TOKEN.replace('-', '%2D'), 'garbage'],
    )
    def test_extraction_is_idempotent(self, raw: str) -> None:
        once = extract_token(raw)

        assert extract_token(once) == once


@pytest.mark.unit
class TestIsValidToken:
    def test_accepts_canonical_shape_in_any_case(self) -> None:
        assert is_valid_token(TOKEN)
        assert is_valid_token(TOKEN.upper())

    @pytest.mark.parametrize(
        'value',
        [None, '', f' {TOKEN}', f'{TOKEN}x', f'/t/{TOKEN}', TOKEN.replace('-', '\u2013')],
    )
    def test_rejects_anything_but_an_exact_match(self, value: str | None) -> None:
        assert not is_valid_token(value)

    def test_new_tokens_are_valid_and_unique(self) -> None:
        tokens = {new_token() for _ in range(100)}

        assert len(tokens) == 100
        assert all(is_valid_token(t) and t == t.lower() for t in tokens)
