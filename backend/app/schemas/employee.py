from pydantic import BaseModel
import uuid
from datetime import datetime


class EmployeeOut(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID
    full_name: str
    position: str | None
    telegram_user_id: str | None
    status: str               # active | warning | terminated
    tz: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
