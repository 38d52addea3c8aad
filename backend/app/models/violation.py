import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Boolean, ForeignKey, Numeric, Text, Date, Index, UniqueConstraint, func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base

SOURCE_AUTO = "auto"
SOURCE_MANUAL = "manual"


class ViolationRule(Base):
    __tablename__ = "violation_rules"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)

    code: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    penalty_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    auto_detectable: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )


# Rule codes are unique per company regardless of case
Index("uq_violation_rule_company_code", ViolationRule.company_id, func.lower(ViolationRule.code), unique=True)


class Violation(Base):
    __tablename__ = "violations"
    __table_args__ = (Index("ix_violations_employee_created", "employee_id", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    company_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    rule_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("violation_rules.id", ondelete="CASCADE"), nullable=False)

    source: Mapped[str] = mapped_column(String(20), nullable=False)  # auto | manual
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    penalty: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    created_by: Mapped[uuid.UUID | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )


class EmployeeRating(Base):
    __tablename__ = "employee_ratings"
    __table_args__ = (
        UniqueConstraint("employee_id", "period_start", "period_end", name="uq_employee_rating_period"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    company_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)

    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    rating: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=100)
    status: Mapped[str] = mapped_column(String(50), default="active")  # active | warning | terminated

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
