from datetime import date, datetime
from zoneinfo import ZoneInfo

from meshfinance.core.config import settings

APP_TZ = ZoneInfo(settings.timezone)


def now_local() -> datetime:
    return datetime.now(tz=APP_TZ)


def today_local() -> date:
    return now_local().date()
