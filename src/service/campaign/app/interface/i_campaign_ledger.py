from abc import ABC, abstractmethod

from src.service.campaign.domain.value_object.ledger_record import LedgerRecord


class ICampaignLedger(ABC):
    @abstractmethod
    def append(self, record: LedgerRecord) -> None:
        """Durable before returning; one record per attempted recipient."""

    @abstractmethod
    def sent_emails(self) -> set[str]:
        """Lowercased emails with at least one successful record."""

    @abstractmethod
    def has_succeeded(self, email: str) -> bool:
        pass

    @abstractmethod
    def successful_records(self) -> list[LedgerRecord]:
        """The latest ok record per email, in first-seen order."""
