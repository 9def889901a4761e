"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.admission.app.command import (
    burn_tickets_use_case,
    issue_ticket_use_case,
    redeem_ticket_use_case,
    resend_ticket_link_use_case,
)
from src.service.admission.app.query import (
    authorize_scanner_use_case,
    get_ticket_use_case,
    list_attendance_use_case,
    list_ticket_types_use_case,
    list_tickets_by_email_use_case,
)
from src.service.admission.driving_adapter.http_controller import ticket_controller
from src.service.admission.driving_adapter.http_controller.auth import api_key_auth


WIRE_MODULES: list[ModuleType] = [
    authorize_scanner_use_case,
    redeem_ticket_use_case,
    issue_ticket_use_case,
    burn_tickets_use_case,
    resend_ticket_link_use_case,
    get_ticket_use_case,
    list_ticket_types_use_case,
    list_tickets_by_email_use_case,
    list_attendance_use_case,
    api_key_auth,
    ticket_controller,
]
