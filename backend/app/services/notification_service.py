"""
Notification Service – Telegram messages to employees.

Graceful degradation: without TELEGRAM_BOT_TOKEN or without a linked chat id
the message is not sent and only logged as "skipped" in NotificationLog.
Sending never raises to the caller.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from app.core.config import settings
from app.models.notification import NotificationLog

if TYPE_CHECKING:
    from app.models.employee import Employee
    from app.repositories import Repositories
    from app.services.violation_detector import DetectedViolation

logger = logging.getLogger(__name__)

EVENT_VIOLATION_DETECTED = "violation_detected"

CHANNEL_TELEGRAM = "telegram"

_VIOLATION_LABELS = {
    "late_start": "Late shift start",
    "early_end": "Shift ended early",
    "missed_shift": "Missed shift",
    "long_break": "Break too long",
    "no_break_end": "Break not ended",
}


def violation_message(event: "DetectedViolation") -> str:
    """Text sent to the employee when a new exception was opened for them."""
    label = _VIOLATION_LABELS.get(event.type, event.type)
    msg = f"⚠️ {label}\nShift date: {event.shift_date.strftime('%d.%m.%Y')}\n"
    details = event.details or {}
    if "minutesLate" in details:
        msg += f"Minutes late: {details['minutesLate']}\n"
    if "minutesEarly" in details:
        msg += f"Minutes early: {details['minutesEarly']}\n"
    if "duration" in details:
        msg += f"Break duration: {details['duration']} min\n"
    msg += "\nPlease contact your manager if this is a mistake."
    return msg


class NotificationService:

    def __init__(self, repos: "Repositories", bot_token: str | None = None):
        self.repos = repos
        self.bot_token = settings.TELEGRAM_BOT_TOKEN if bot_token is None else bot_token

    async def notify_employee(self, employee: "Employee", event_type: str, message: str) -> str:
        """Send `message` to the employee; returns the logged status."""
        if not employee.telegram_user_id:
            status, sent_at, err = "skipped", None, "Employee has no linked chat"
        elif not self.bot_token:
            status, sent_at, err = "skipped", None, "TELEGRAM_BOT_TOKEN not configured"
        else:
            ok, err = await self._send_telegram(employee.telegram_user_id, message)
            status = "sent" if ok else "failed"
            sent_at = datetime.now(timezone.utc) if ok else None

        if status == "failed":
            logger.warning("Telegram message to employee %s failed: %s", employee.id, err)
        elif status == "skipped":
            logger.info("Notification for employee %s skipped: %s", employee.id, err)

        try:
            await self.repos.notifications.add(NotificationLog(
                company_id=employee.company_id,
                employee_id=employee.id,
                channel=CHANNEL_TELEGRAM,
                event_type=event_type,
                body=message,
                status=status,
                sent_at=sent_at,
                error=err,
            ))
            await self.repos.commit()
        except Exception:
            await self.repos.rollback()
            logger.warning("Could not store notification log for employee %s", employee.id, exc_info=True)
        return status

    async def _send_telegram(self, chat_id: str, message: str) -> tuple[bool, str | None]:
        try:
            from telegram import Bot
            bot = Bot(token=self.bot_token)
            async with bot:
                await bot.send_message(chat_id=chat_id, text=message)
            return True, None
        except Exception as e:
            return False, str(e)[:200]
