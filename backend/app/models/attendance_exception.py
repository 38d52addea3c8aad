import uuid
from datetime import date as date_type, datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, Integer, Date, JSON, Index, text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class AttendanceException(Base):
    """Reviewable record of a detected attendance issue ("exception" in the dashboard)."""

    __tablename__ = "exceptions"
    __table_args__ = (
        # Only one unresolved exception per employee, day and kind
        Index(
            "uq_exception_open",
            "employee_id",
            "date",
            "kind",
            unique=True,
            sqlite_where=text("resolved_at IS NULL"),
            postgresql_where=text("resolved_at IS NULL"),
        ),
        Index("ix_exception_violation_id", "violation_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)

    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    kind: Mapped[str] = mapped_column(String(50), nullable=False)
    severity: Mapped[int] = mapped_column(Integer, default=1)  # 1=low, 2=medium, 3=high
    details: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    violation_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("violations.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
