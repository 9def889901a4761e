from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.admission.domain.entity.ticket_type_entity import TicketType


class ITicketTypeQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, ticket_type_id: str) -> Optional[TicketType]:
        pass

    @abstractmethod
    async def list_all(self) -> List[TicketType]:
        pass
