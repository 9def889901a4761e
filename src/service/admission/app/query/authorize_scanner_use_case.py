from datetime import datetime, timezone
import hashlib
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.platform.types.result import Err, ErrorKind, Ok, Result
from src.service.admission.app.interface.i_scanner_key_query_repo import IScannerKeyQueryRepo
from src.service.admission.domain.entity.scanner_key_entity import ScannerKey

# One message for unknown, inactive, expired and out-of-scope keys alike
INVALID_SCANNER_KEY = 'Invalid scanner key'


def hash_scanner_secret(secret: str) -> str:
    return hashlib.sha256(secret.encode('utf-8')).hexdigest()


class AuthorizeScannerUseCase:
    def __init__(self, scanner_key_query_repo: IScannerKeyQueryRepo) -> None:
        self.scanner_key_query_repo = scanner_key_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        scanner_key_query_repo: IScannerKeyQueryRepo = Depends(
            Provide[Container.scanner_key_query_repo]
        ),
    ) -> Self:
        return cls(scanner_key_query_repo=scanner_key_query_repo)

    @Logger.io
    async def authorize(
        self, *, bearer: str, event_id: Optional[str] = None
    ) -> Result[ScannerKey]:
        secret = bearer.strip()
        if not secret:
            return Err(ErrorKind.FORBIDDEN, INVALID_SCANNER_KEY)

        key = await self.scanner_key_query_repo.get_usable_by_hash(
            key_hash=hash_scanner_secret(secret), now=datetime.now(timezone.utc)
        )
        if key is None or (event_id is not None and key.event_id != event_id):
            return Err(ErrorKind.FORBIDDEN, INVALID_SCANNER_KEY)

        return Ok(key)
