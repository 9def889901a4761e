"""
Ticket Token Value Object - Shared Kernel

A ticket token is the ticket's primary key and the payload printed in its
QR code: a lowercase hyphenated UUID with version nibble 1-8 and RFC 4122
variant. Scanners and humans hand us noisy text (URLs, percent-encoding,
zero-width characters from chat apps, typographic dashes), so extraction
cleans the input before searching for that shape.
"""

import re
from typing import Optional
import unicodedata
from urllib.parse import unquote

import uuid_utils


_TOKEN_BODY = r'[0-9a-f]{8}-[0-9a-f]{4}-[1-8][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}'
TOKEN_PATTERN = re.compile(rf'^{_TOKEN_BODY}$', re.IGNORECASE)
_TOKEN_SEARCH_PATTERN = re.compile(_TOKEN_BODY, re.IGNORECASE)

_INVISIBLE_CHARS = dict.fromkeys(
    map(ord, '\u200b\u200c\u200d\u2060\ufeff\u00ad\u180e'),
    None,
)
_DASH_VARIANTS = dict.fromkeys(
    map(ord, '\u2010\u2011\u2012\u2013\u2014\u2015\u2212\ufe58\ufe63\uff0d'),
    '-',
)

_MAX_PERCENT_DECODE_ROUNDS = 3


def _percent_decode(text: str) -> str:
    # Payloads are sometimes double-encoded by the URL that carried them
    for _ in range(_MAX_PERCENT_DECODE_ROUNDS):
        decoded = unquote(text)
        if decoded == text:
            break
        text = decoded
    return text


def clean_token_input(raw: str) -> str:
    text = _percent_decode(raw)
    text = unicodedata.normalize('NFKC', text)
    text = text.translate(_INVISIBLE_CHARS).translate(_DASH_VARIANTS)
    return text.strip()


def extract_token(raw: Optional[str]) -> Optional[str]:
    """Return the first canonical token found in `raw`, lowercased, or None.

    None means "not a ticket", not an error.
    """
    if not raw:
        return None
    match = _TOKEN_SEARCH_PATTERN.search(clean_token_input(raw))
    return match.group(0).lower() if match else None


def is_valid_token(value: Optional[str]) -> bool:
    return bool(value) and TOKEN_PATTERN.fullmatch(value) is not None  # type: ignore[arg-type]


def new_token() -> str:
    return str(uuid_utils.uuid4())
