from pydantic import BaseModel, Field
import uuid
from datetime import datetime
from decimal import Decimal


# ── Rules ─────────────────────────────────────────────────────────────────────

class ViolationRuleCreate(BaseModel):
    company_id: uuid.UUID
    code: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=255)
    penalty_percent: Decimal = Field(ge=0, le=100)
    auto_detectable: bool = False
    is_active: bool = True


class ViolationRuleUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=100)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    penalty_percent: Decimal | None = Field(default=None, ge=0, le=100)
    auto_detectable: bool | None = None
    is_active: bool | None = None


class ViolationRuleOut(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID
    code: str
    name: str
    penalty_percent: Decimal
    auto_detectable: bool
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


# ── Violations ────────────────────────────────────────────────────────────────

class ViolationCreate(BaseModel):
    employee_id: uuid.UUID
    company_id: uuid.UUID
    rule_id: uuid.UUID
    reason: str | None = None
    penalty: Decimal | None = Field(default=None, ge=0, le=100)
    created_by: uuid.UUID | None = None


class ViolationUpdate(BaseModel):
    rule_id: uuid.UUID | None = None
    reason: str | None = None
    penalty: Decimal | None = Field(default=None, ge=0, le=100)


class ViolationOut(BaseModel):
    id: uuid.UUID
    employee_id: uuid.UUID
    company_id: uuid.UUID
    rule_id: uuid.UUID
    source: str               # auto | manual
    reason: str | None
    penalty: Decimal
    created_by: uuid.UUID | None
    created_at: datetime

    model_config = {"from_attributes": True}
