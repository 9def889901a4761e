from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class TicketModel(Base):
    __tablename__ = 'tickets'

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    ticket_type_id: Mapped[str] = mapped_column(
        String(36), ForeignKey('ticket_types.id'), nullable=False, index=True
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    used_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    used_by_scanner_key_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey('scanner_keys.id'), nullable=True
    )
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint(
            'used OR (used_at IS NULL AND used_by_scanner_key_id IS NULL)',
            name='ck_tickets_unused_unstamped',
        ),
        CheckConstraint('NOT used OR used_at IS NOT NULL', name='ck_tickets_used_stamped'),
        Index('ix_tickets_email_issued_at', 'email', 'issued_at'),
        Index('ix_tickets_used_at', 'used_at'),
    )
