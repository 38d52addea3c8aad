from fastapi import APIRouter, HTTPException, status

from app.api.deps import Repos
from app.schemas.employee import EmployeeOut

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("/by-telegram/{telegram_user_id}", response_model=EmployeeOut)
async def get_employee_by_telegram(telegram_user_id: str, repos: Repos):
    """Chat bot lookup: which employee is behind this Telegram account."""
    employee = await repos.employees.get_by_telegram_id(telegram_user_id)
    if not employee:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    return employee
