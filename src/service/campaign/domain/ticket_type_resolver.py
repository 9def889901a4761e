"""
Map free-text ticket choices from spreadsheet exports onto known ticket types.

Form answers drift ("Mat og ball", "matur + ball", "Bara ball!"), so
resolution is layered: exact name, then a synonym table, then keyword
precedence. Anything still ambiguous resolves to None and the row is
reported, never silently assigned a default type.
"""

import re
import unicodedata
from enum import StrEnum
from typing import Iterable, Optional

from src.service.campaign.domain.value_object.remote_ticket import TicketTypeOption


_LOCALE_LETTERS = str.maketrans({'þ': 'th', 'ð': 'd', 'æ': 'ae', 'ø': 'o'})
_WHITESPACE = re.compile(r'\s+')
_NON_HEADER_CHARS = re.compile(r'[^a-z0-9_]')

_BALL = re.compile(r'\bball\b')
_FOOD = re.compile(r'\b(matur|mat)\b')
_ONLY = re.compile(r'\bbara\b')


class TypeCategory(StrEnum):
    FOOD_AND_BALL = 'food_and_ball'
    BALL_ONLY = 'ball_only'


def normalize_key(text: Optional[str]) -> str:
    value = (text or '').strip().lower().translate(_LOCALE_LETTERS)
    value = unicodedata.normalize('NFKD', value)
    value = ''.join(ch for ch in value if not unicodedata.combining(ch))
    return _WHITESPACE.sub(' ', value).strip()


def normalize_header(text: Optional[str]) -> str:
    """'HÍ email' -> 'hi_email', 'Greiðsla komin?' -> 'greidsla_komin'."""
    return _NON_HEADER_CHARS.sub('', normalize_key(text).replace(' ', '_'))


def categorize(text: Optional[str]) -> Optional[TypeCategory]:
    key = normalize_key(text)
    has_ball = _BALL.search(key) is not None
    if has_ball and _FOOD.search(key):
        return TypeCategory.FOOD_AND_BALL
    if key == 'ball' or (has_ball and _ONLY.search(key)):
        return TypeCategory.BALL_ONLY
    return None


SYNONYMS: dict[str, str] = {
    'mat og ball': 'matur + ball',
    'matur og ball': 'matur + ball',
    'matur + ball': 'matur + ball',
    'ball': 'bara ball',
    'bara ball': 'bara ball',
}


class TicketTypeResolver:
    def __init__(self, options: Iterable[TicketTypeOption]) -> None:
        self._by_id: dict[str, TicketTypeOption] = {}
        self._by_key: dict[str, TicketTypeOption] = {}
        self._by_category: dict[TypeCategory, Optional[TicketTypeOption]] = {}

        for option in options:
            self._by_id[option.id] = option
            self._by_key.setdefault(normalize_key(option.name), option)
            category = categorize(option.name)
            if category is None:
                continue
            # Two known types in one category make keyword matching ambiguous
            if category in self._by_category:
                self._by_category[category] = None
            else:
                self._by_category[category] = option

    @property
    def options(self) -> list[TicketTypeOption]:
        return list(self._by_id.values())

    def by_id(self, type_id: str) -> Optional[TicketTypeOption]:
        return self._by_id.get(type_id)

    def resolve_option(self, raw: Optional[str]) -> Optional[TicketTypeOption]:
        key = normalize_key(raw)
        if not key:
            return None

        direct = self._by_key.get(key)
        if direct is not None:
            return direct

        canonical = SYNONYMS.get(key)
        if canonical is not None and canonical in self._by_key:
            return self._by_key[canonical]

        category = categorize(key)
        if category is None:
            return None
        return self._by_category.get(category)

    def resolve(self, raw: Optional[str]) -> Optional[str]:
        option = self.resolve_option(raw)
        return option.id if option else None
