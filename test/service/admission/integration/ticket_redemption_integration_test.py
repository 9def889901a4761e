"""
Integration tests for door admission

Tests:
1. Exactly one VALID under concurrent scans of the same ticket
2. Scanner keys are scoped to their event; inactive/expired keys are refused
3. Token extraction from noisy scanner input
4. Admin burn interacts with redemption
"""

from collections import Counter
from datetime import datetime, timezone
from typing import List

import anyio
import httpx
import pytest

from src.platform.config.di import container


def _scan_headers(secret: str) -> dict[str, str]:
    return {'Authorization': f'Bearer {secret}'}


async def _validate(client: httpx.AsyncClient, secret: str, **body: str) -> httpx.Response:
    return await client.post('/tickets/validate', json=body, headers=_scan_headers(secret))


@pytest.mark.integration
class TestConcurrentRedemption:
    async def test_exactly_one_scan_wins(self, client: httpx.AsyncClient, seeded, insert_ticket):
        ticket_id = await insert_ticket(ticket_type_id=seeded.food_and_ball_type_id)
        statuses: List[str] = []

        async def scan() -> None:
            response = await client.post(
                '/tickets/validate',
                json={'token': ticket_id},
                headers=_scan_headers(seeded.door_secret),
            )
            assert response.status_code == 200
            statuses.append(response.json()['status'])

        async with anyio.create_task_group() as tg:
            for _ in range(12):
                tg.start_soon(scan)

        assert Counter(statuses) == {'VALID': 1, 'ALREADY_USED': 11}

    async def test_use_case_level_race(self, seeded, insert_ticket):
        ticket_id = await insert_ticket(ticket_type_id=seeded.ball_only_type_id)
        command_repo = container.ticket_command_repo()
        wins: List[bool] = []

        async def attempt() -> None:
            won = await command_repo.mark_used(
                ticket_id=ticket_id,
                event_id=seeded.event_id,
                scanner_key_id=seeded.scanner_key_id,
                used_at=datetime.now(timezone.utc),
            )
            wins.append(won)

        async with anyio.create_task_group() as tg:
            for _ in range(8):
                tg.start_soon(attempt)

        assert wins.count(True) == 1
        assert len(wins) == 8


@pytest.mark.integration
class TestValidateEndpoint:
    async def test_valid_then_already_used(self, client: httpx.AsyncClient, seeded, insert_ticket):
        ticket_id = await insert_ticket(
            ticket_type_id=seeded.food_and_ball_type_id, email='jon@hi.is', name='Jón'
        )

        first = await _validate(client, seeded.door_secret, token=ticket_id)
        second = await client.post(
            '/tickets/validate',
            json={'ticketId': ticket_id, 'eventId': seeded.event_id.upper()},
            headers=_scan_headers(seeded.door_secret),
        )

        assert first.status_code == 200
        body = first.json()
        assert body['ok'] is True
        assert body['status'] == 'VALID'
        assert body['ticket']['id'] == ticket_id
        assert body['ticket']['used'] is True
        assert body['ticket']['ticketType'] == 'Matur + ball'
        assert body['ticket']['eventName'] == 'Árshátíð FV'
        assert body['ticket']['scannedBy'] == 'Door A'
        assert second.json()['status'] == 'ALREADY_USED'
        assert second.json()['ticket']['usedAt'] == body['ticket']['usedAt']

    async def test_noisy_scanner_input(self, client: httpx.AsyncClient, seeded, insert_ticket):
        ticket_id = await insert_ticket(ticket_type_id=seeded.food_and_ball_type_id)
        noisy = 'https://tickets.test/t/' + ticket_id.upper().replace('-', '\u2013', 1) + '\u200b'

        response = await _validate(client, seeded.door_secret, token=noisy)

        assert response.json()['status'] == 'VALID'

    @pytest.mark.parametrize('token', ['not a ticket', '00000000-0000-4000-8000-000000000000'])
    async def test_unknown_tokens_are_not_found(
        self, client: httpx.AsyncClient, seeded, token: str
    ):
        response = await _validate(client, seeded.door_secret, token=token)

        assert response.status_code == 200
        assert response.json() == {'ok': True, 'status': 'NOT_FOUND'}

    async def test_key_for_another_event_cannot_redeem(
        self, client: httpx.AsyncClient, seeded, insert_ticket
    ):
        ticket_id = await insert_ticket(ticket_type_id=seeded.food_and_ball_type_id)

        response = await client.post(
            '/tickets/validate',
            json={'token': ticket_id},
            headers=_scan_headers(seeded.other_door_secret),
        )
        # still redeemable by the right door afterwards
        retry = await _validate(client, seeded.door_secret, token=ticket_id)

        assert response.json() == {'ok': True, 'status': 'NOT_FOUND'}
        assert retry.json()['status'] == 'VALID'

    async def test_event_scope_mismatch_is_forbidden(
        self, client: httpx.AsyncClient, seeded, insert_ticket
    ):
        ticket_id = await insert_ticket(ticket_type_id=seeded.food_and_ball_type_id)

        response = await client.post(
            '/tickets/validate',
            json={'token': ticket_id, 'eventId': seeded.other_event_id},
            headers=_scan_headers(seeded.door_secret),
        )

        assert response.status_code == 403
        assert response.json() == {'ok': False, 'error': 'Invalid scanner key'}

    @pytest.mark.parametrize('secret_field', ['inactive_secret', 'expired_secret'])
    async def test_unusable_keys_are_forbidden(
        self, client: httpx.AsyncClient, seeded, insert_ticket, secret_field: str
    ):
        ticket_id = await insert_ticket(ticket_type_id=seeded.food_and_ball_type_id)

        response = await client.post(
            '/tickets/validate',
            json={'token': ticket_id},
            headers=_scan_headers(getattr(seeded, secret_field)),
        )

        assert response.status_code == 403

    async def test_unknown_key_is_forbidden(self, client: httpx.AsyncClient, seeded):
        response = await client.post(
            '/tickets/validate', json={'token': 'x'}, headers=_scan_headers('guessed')
        )

        assert response.status_code == 403

    async def test_missing_bearer_is_unauthorized(self, client: httpx.AsyncClient, seeded):
        response = await client.post('/tickets/validate', json={'token': 'x'})

        assert response.status_code == 401
        assert response.json()['ok'] is False

    async def test_missing_token_is_bad_request(self, client: httpx.AsyncClient, seeded):
        response = await client.post(
            '/tickets/validate', json={'token': '  '}, headers=_scan_headers(seeded.door_secret)
        )

        assert response.status_code == 400
        assert response.json() == {'ok': False, 'error': 'Missing ticketId'}


@pytest.mark.integration
class TestBurn:
    async def test_burn_marks_unused_and_keeps_scan_stamp(
        self, client: httpx.AsyncClient, seeded, insert_ticket, admin_headers
    ):
        scanned_id = await insert_ticket(ticket_type_id=seeded.food_and_ball_type_id)
        unused_id = await insert_ticket(ticket_type_id=seeded.food_and_ball_type_id)
        scan = await _validate(client, seeded.door_secret, token=scanned_id)
        scanned_at = scan.json()['ticket']['usedAt']

        burn = await client.post(
            '/admin/tickets/burn',
            json={'ticketIds': [scanned_id, unused_id.upper(), 'junk']},
            headers=admin_headers,
        )

        assert burn.status_code == 200
        assert burn.json() == {'ok': True, 'burned': 2, 'rows': [scanned_id, unused_id]}

        scanned = (await client.get('/tickets/get', params={'id': scanned_id})).json()['ticket']
        burned = (await client.get('/tickets/get', params={'id': unused_id})).json()['ticket']
        assert scanned['usedAt'] == scanned_at
        assert scanned['scannedBy'] == 'Door A'
        assert burned['used'] is True
        assert burned['usedAt'] is not None
        assert 'scannedBy' not in burned

        rescan = await _validate(client, seeded.door_secret, token=unused_id)
        assert rescan.json()['status'] == 'ALREADY_USED'

    async def test_burn_is_idempotent(
        self, client: httpx.AsyncClient, seeded, insert_ticket, admin_headers
    ):
        ticket_id = await insert_ticket(ticket_type_id=seeded.ball_only_type_id)

        first = await client.post(
            '/admin/tickets/burn', json={'ticketId': ticket_id}, headers=admin_headers
        )
        used_at = (await client.get('/tickets/get', params={'id': ticket_id})).json()['ticket'][
            'usedAt'
        ]
        second = await client.post(
            '/admin/tickets/burn', json={'ticketId': ticket_id}, headers=admin_headers
        )
        after = (await client.get('/tickets/get', params={'id': ticket_id})).json()['ticket']

        assert first.json()['burned'] == 1
        assert second.json()['burned'] == 1
        assert after['usedAt'] == used_at

    async def test_non_string_entries_are_dropped(
        self, client: httpx.AsyncClient, seeded, insert_ticket, admin_headers
    ):
        ticket_id = await insert_ticket(ticket_type_id=seeded.ball_only_type_id)

        response = await client.post(
            '/admin/tickets/burn',
            json={'ticketIds': [ticket_id, 42, None, {'id': ticket_id}]},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json() == {'ok': True, 'burned': 1, 'rows': [ticket_id]}

    async def test_unknown_ids_burn_nothing(self, client: httpx.AsyncClient, seeded, admin_headers):
        response = await client.post(
            '/admin/tickets/burn',
            json={'ticketIds': ['00000000-0000-4000-8000-000000000000']},
            headers=admin_headers,
        )

        assert response.json()['burned'] == 0

    async def test_no_valid_ids(self, client: httpx.AsyncClient, seeded, admin_headers):
        response = await client.post(
            '/admin/tickets/burn', json={'ticketIds': ['junk']}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json() == {'ok': False, 'error': 'Missing ticketId(s)'}
