from enum import StrEnum


class SkipReason(StrEnum):
    INVALID_EMAIL = 'invalid_email'
    NOT_PAID = 'not_paid'
    UNKNOWN_TYPE = 'unknown_type'
    DUPLICATE = 'duplicate'
    ALREADY_SENT = 'already_sent'
    SKIPPED = 'skipped'
    # resend-links only
    NOT_SELECTED = 'not_selected'
    EMAIL_DELIVERED = 'email_delivered'
    NO_TICKET_ID = 'no_ticket_id'
