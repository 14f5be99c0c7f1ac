from __future__ import annotations

from typing import ClassVar, Optional

import sqlalchemy as sa
from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from ejournal.db.base import Base, TimestampMixin


class SystemLog(TimestampMixin, Base):
    __tablename__ = "system_logs"

    NOTE: ClassVar[str] = "description=Audit trail of user actions (logins, role switches, record changes)."

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), index=True)
    action: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    details: Mapped[Optional[str]] = mapped_column(sa.Text)
    ip_address: Mapped[Optional[str]] = mapped_column(sa.String(64))
