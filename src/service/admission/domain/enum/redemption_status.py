from enum import StrEnum


class RedemptionStatus(StrEnum):
    VALID = 'VALID'
    ALREADY_USED = 'ALREADY_USED'
    NOT_FOUND = 'NOT_FOUND'
