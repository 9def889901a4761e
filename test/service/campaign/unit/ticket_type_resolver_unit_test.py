"""
Unit tests for TicketTypeResolver

Resolution order: exact name -> synonym table -> keyword precedence.
Ambiguous text must resolve to None.
"""

import pytest

from src.service.campaign.domain.ticket_type_resolver import (
    TicketTypeResolver,
    TypeCategory,
    categorize,
    normalize_header,
    normalize_key,
)
from src.service.campaign.domain.value_object.remote_ticket import TicketTypeOption


FOOD_AND_BALL = TicketTypeOption(id='type-food', name='Matur + ball')
BALL_ONLY = TicketTypeOption(id='type-ball', name='Bara ball')


@pytest.fixture
def resolver() -> TicketTypeResolver:
    return TicketTypeResolver([FOOD_AND_BALL, BALL_ONLY])


@pytest.mark.unit
class TestNormalization:
    @pytest.mark.parametrize(
        ('raw', 'expected'),
        [
            ('  Matur +  Ball ', 'matur + ball'),
            ('Þórður', 'thordur'),
            ('Æfing', 'aefing'),
            ('Björn Ørn', 'bjorn orn'),
            ('Já', 'ja'),
            (None, ''),
        ],
    )
    def test_normalize_key(self, raw: str | None, expected: str) -> None:
        assert normalize_key(raw) == expected

    @pytest.mark.parametrize(
        ('raw', 'expected'),
        [
            ('HÍ email', 'hi_email'),
            ('Email Address', 'email_address'),
            ('Fullt nafn', 'fullt_nafn'),
            ('Hvernig miða ætlar þú að kaupa?', 'hvernig_mida_aetlar_thu_ad_kaupa'),
            ('Greiðsla komin?', 'greidsla_komin'),
            ('ticketTypeId', 'tickettypeid'),
        ],
    )
    def test_normalize_header(self, raw: str, expected: str) -> None:
        assert normalize_header(raw) == expected


@pytest.mark.unit
class TestCategorize:
    @pytest.mark.parametrize(
        ('text', 'expected'),
        [
            ('Matur + ball', TypeCategory.FOOD_AND_BALL),
            ('Mat og ball', TypeCategory.FOOD_AND_BALL),
            ('Bara ball', TypeCategory.BALL_ONLY),
            ('ball', TypeCategory.BALL_ONLY),
            ('Matur', None),
            # whole words only
            ('Ballroom dancing', None),
            ('Matseðill', None),
        ],
    )
    def test_keyword_rule(self, text: str, expected: TypeCategory | None) -> None:
        assert categorize(text) == expected


@pytest.mark.unit
class TestResolve:
    def test_exact_name_ignores_case_and_spacing(self, resolver: TicketTypeResolver) -> None:
        assert resolver.resolve(' MATUR + BALL ') == FOOD_AND_BALL.id
        assert resolver.resolve('bara ball') == BALL_ONLY.id

    @pytest.mark.parametrize(
        ('raw', 'expected_id'),
        [
            ('Mat og ball', FOOD_AND_BALL.id),
            ('Matur og ball', FOOD_AND_BALL.id),
            ('Ball', BALL_ONLY.id),
        ],
    )
    def test_synonyms(self, resolver: TicketTypeResolver, raw: str, expected_id: str) -> None:
        assert resolver.resolve(raw) == expected_id

    @pytest.mark.parametrize(
        ('raw', 'expected_id'),
        [
            ('Ég vil mat og ball takk', FOOD_AND_BALL.id),
            ('Matur, drykkir og ball', FOOD_AND_BALL.id),
            ('Bara ballið? nei, bara ball', BALL_ONLY.id),
        ],
    )
    def test_keyword_precedence(
        self, resolver: TicketTypeResolver, raw: str, expected_id: str
    ) -> None:
        assert resolver.resolve(raw) == expected_id

    def test_food_beats_ball_only_when_both_match(self, resolver: TicketTypeResolver) -> None:
        assert resolver.resolve('bara ball eða mat og ball') == FOOD_AND_BALL.id

    @pytest.mark.parametrize('raw', [None, '', 'Matur', 'Veit ekki', 'Ballroom'])
    def test_ambiguous_text_resolves_to_none(
        self, resolver: TicketTypeResolver, raw: str | None
    ) -> None:
        assert resolver.resolve(raw) is None

    def test_keyword_match_needs_a_single_candidate(self) -> None:
        resolver = TicketTypeResolver(
            [FOOD_AND_BALL, TicketTypeOption(id='type-vip', name='VIP matur og ball')]
        )

        assert resolver.resolve('mat og ball takk') is None
        # exact names still resolve
        assert resolver.resolve('VIP matur og ball') == 'type-vip'

    def test_synonym_needs_a_known_target(self) -> None:
        resolver = TicketTypeResolver([FOOD_AND_BALL])

        assert resolver.resolve('ball') is None
