import os
from pathlib import Path
from typing import Iterator, Optional, Union

import orjson

from src.platform.logging.loguru_io import Logger
from src.service.campaign.app.interface.i_campaign_ledger import ICampaignLedger
from src.service.campaign.domain.value_object.ledger_record import LedgerRecord


class JsonlCampaignLedger(ICampaignLedger):
    """
    Append-only JSON Lines ledger.

    Each append is flushed and fsynced before returning, so a crash loses
    at most the record being written. A torn last line is closed off before
    the next append and skipped on replay.
    The sent index is read from disk once and then kept current by `append`.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._sent: Optional[set[str]] = None

    def append(self, record: LedgerRecord) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        line = orjson.dumps(record.to_dict()) + b'\n'
        with self.path.open('ab+') as f:
            # a torn tail must not swallow the next record
            if f.seek(0, os.SEEK_END) > 0:
                f.seek(-1, os.SEEK_END)
                if f.read(1) != b'\n':
                    line = b'\n' + line
            f.write(line)
            f.flush()
            os.fsync(f.fileno())

        if record.ok and self._sent is not None:
            self._sent.add(record.email.strip().lower())

    def sent_emails(self) -> set[str]:
        if self._sent is None:
            self._sent = self._scan()
        return set(self._sent)

    def has_succeeded(self, email: str) -> bool:
        if self._sent is None:
            self._sent = self._scan()
        return email.strip().lower() in self._sent

    def successful_records(self) -> list[LedgerRecord]:
        latest: dict[str, LedgerRecord] = {}
        for record in self._records():
            if record.ok:
                latest[record.email.lower()] = record
        return list(latest.values())

    def _scan(self) -> set[str]:
        sent = {r.email.lower() for r in self._records() if r.ok}
        Logger.base.info(f'📒 [Ledger] {len(sent)} recipients already sent in {self.path}')
        return sent

    def _records(self) -> Iterator[LedgerRecord]:
        if not self.path.exists():
            return

        corrupt = 0
        with self.path.open('rb') as f:
            for raw_line in f:
                line = raw_line.strip()
                if not line:
                    continue
                try:
                    entry = orjson.loads(line)
                except orjson.JSONDecodeError:
                    corrupt += 1
                    continue
                record = LedgerRecord.from_dict(entry)
                if record is not None:
                    yield record

        if corrupt:
            Logger.base.warning(f'⚠️  [Ledger] Skipped {corrupt} unreadable lines in {self.path}')
