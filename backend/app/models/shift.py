import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base

SHIFT_PLANNED = "planned"
SHIFT_ACTIVE = "active"
SHIFT_COMPLETED = "completed"
SHIFT_CANCELLED = "cancelled"

# Allowed status transitions; completed and cancelled are terminal
SHIFT_TRANSITIONS: dict[str, set[str]] = {
    SHIFT_PLANNED: {SHIFT_ACTIVE, SHIFT_CANCELLED},
    SHIFT_ACTIVE: {SHIFT_COMPLETED, SHIFT_CANCELLED},
    SHIFT_COMPLETED: set(),
    SHIFT_CANCELLED: set(),
}


class Shift(Base):
    __tablename__ = "shifts"
    __table_args__ = (Index("ix_shifts_employee_planned_start", "employee_id", "planned_start"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)

    planned_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    planned_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    actual_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    actual_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    status: Mapped[str] = mapped_column(String(50), default=SHIFT_PLANNED)  # planned | active | completed | cancelled

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    def can_transition_to(self, status: str) -> bool:
        return status in SHIFT_TRANSITIONS.get(self.status, set())


class WorkInterval(Base):
    __tablename__ = "work_intervals"
    __table_args__ = (
        # At most one open work interval per shift
        Index(
            "uq_work_interval_open",
            "shift_id",
            unique=True,
            sqlite_where=text("end_at IS NULL"),
            postgresql_where=text("end_at IS NULL"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    shift_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False)
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    source: Mapped[str] = mapped_column(String(50), default="bot")  # bot | manual | auto


class BreakInterval(Base):
    __tablename__ = "break_intervals"
    __table_args__ = (
        Index(
            "uq_break_interval_open",
            "shift_id",
            unique=True,
            sqlite_where=text("end_at IS NULL"),
            postgresql_where=text("end_at IS NULL"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    shift_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False)
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    type: Mapped[str] = mapped_column(String(50), default="lunch")  # lunch | short
    source: Mapped[str] = mapped_column(String(50), default="bot")
