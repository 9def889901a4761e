"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.admission.driven_adapter.model.event_model import EventModel
from src.service.admission.driven_adapter.model.scanner_key_model import ScannerKeyModel
from src.service.admission.driven_adapter.model.ticket_model import TicketModel
from src.service.admission.driven_adapter.model.ticket_type_model import TicketTypeModel

__all__ = [
    'EventModel',
    'ScannerKeyModel',
    'TicketModel',
    'TicketTypeModel',
]
