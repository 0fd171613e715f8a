# src/time_utils.py
from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Callable, List, Optional, Tuple
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

# Default timezone for the playground (IANA string)
DEFAULT_TIMEZONE = "Asia/Shanghai"

UTC = timezone.utc


def get_tz(tz_name: str) -> ZoneInfo | timezone:
    """Get ZoneInfo for IANA timezone name, with fallback to default."""
    if not tz_name:
        tz_name = DEFAULT_TIMEZONE
    try:
        return ZoneInfo(tz_name)
    except Exception:
        try:
            return ZoneInfo(DEFAULT_TIMEZONE)
        except Exception:
            return UTC


def now_in_tz(tz_name: str) -> datetime:
    """Current time in specified timezone."""
    return datetime.now(get_tz(tz_name))


# ======== CHINESE DATE/TIME EXTRACTION ========

CLOCK_RE = re.compile(r"(\d{1,2})[点:：](\d{1,2})?")
MONTH_DAY_RE = re.compile(r"(\d{1,2})月(\d{1,2})[日号]")

PM_WORDS = ("下午", "傍晚")
NIGHT_WORDS = ("晚上",)
NOON_WORDS = ("中午",)
AM_WORDS = ("上午", "早上", "清晨")

# Воскресенье = 0, суббота = 6
WEEKDAY_WORDS: Tuple[Tuple[str, int], ...] = (
    ("周一", 1), ("星期一", 1), ("礼拜一", 1),
    ("周二", 2), ("星期二", 2), ("礼拜二", 2),
    ("周三", 3), ("星期三", 3), ("礼拜三", 3),
    ("周四", 4), ("星期四", 4), ("礼拜四", 4),
    ("周五", 5), ("星期五", 5), ("礼拜五", 5),
    ("周六", 6), ("星期六", 6), ("礼拜六", 6),
    ("周日", 0), ("星期日", 0), ("礼拜日", 0), ("周天", 0), ("星期天", 0),
)


def parse_clock(text: str) -> Optional[Tuple[int, int]]:
    """
    Парсит "3点", "15:30", "9点05".
    Возвращает (hour, minute) без проверки диапазонов или None.
    """
    if not text:
        return None
    m = CLOCK_RE.search(text)
    if not m:
        return None
    minute = int(m.group(2)) if m.group(2) else 0
    return int(m.group(1)), minute


def detect_day_period(text: str) -> Optional[str]:
    """Returns "pm", "night", "noon", "am" for an explicit period word, else None."""
    if any(w in text for w in PM_WORDS):
        return "pm"
    if any(w in text for w in NIGHT_WORDS):
        return "night"
    if any(w in text for w in NOON_WORDS):
        return "noon"
    if any(w in text for w in AM_WORDS):
        return "am"
    return None


def _apply_period(hour: int, period: str) -> int:
    if period in ("pm", "night") and hour < 12:
        return hour + 12
    if period == "night" and hour == 12:
        # "晚上12点" = 0:00 следующего дня
        return 24
    if period == "noon" and 1 <= hour <= 5:
        return hour + 12
    if period == "am" and hour == 12:
        return 0
    return hour


def sunday_first_weekday(d: date) -> int:
    """Weekday index with Sunday = 0 and Saturday = 6."""
    return (d.weekday() + 1) % 7


def end_of_day(d: date, tz: Optional[tzinfo]) -> datetime:
    return datetime(d.year, d.month, d.day, 23, 59, 59, 999000, tzinfo=tz)


def _at_clock(d: date, hour: int, minute: int, tz: Optional[tzinfo]) -> datetime:
    # смещение от полуночи: "25点" уезжает на следующий день, а не падает
    return datetime.combine(d, time(0, 0), tzinfo=tz) + timedelta(hours=hour, minutes=minute)


def _on_day(text: str, day: date, now: datetime, *, pm_heuristic: bool = False) -> datetime:
    """Дата + необязательное время из фразы; без времени будет конец дня."""
    clock = parse_clock(text)
    if clock is None:
        return end_of_day(day, now.tzinfo)

    hour, minute = clock
    period = detect_day_period(text)
    if period is not None:
        hour = _apply_period(hour, period)
    elif pm_heuristic and hour <= 12 and hour < now.hour:
        # "3点" днём, когда уже 10 утра прошло, почти всегда означает 15:00
        hour += 12
    return _at_clock(day, hour, minute, now.tzinfo)


def _relative_day(offset: int, pm_heuristic: bool = False) -> Callable[[str, datetime], Optional[datetime]]:
    def handler(text: str, now: datetime) -> Optional[datetime]:
        day = now.date() + timedelta(days=offset)
        return _on_day(text, day, now, pm_heuristic=pm_heuristic)

    return handler


def _this_week(text: str, now: datetime) -> Optional[datetime]:
    day = sunday_first_weekday(now.date())
    days_until_sunday = 0 if day == 0 else 7 - day
    return end_of_day(now.date() + timedelta(days=days_until_sunday), now.tzinfo)


def _next_week(text: str, now: datetime) -> Optional[datetime]:
    day = sunday_first_weekday(now.date())
    days_until_next_sunday = 7 if day == 0 else 14 - day
    return end_of_day(now.date() + timedelta(days=days_until_next_sunday), now.tzinfo)


def _this_month(text: str, now: datetime) -> Optional[datetime]:
    return end_of_day(now.date() + relativedelta(day=31), now.tzinfo)


def _next_month(text: str, now: datetime) -> Optional[datetime]:
    return end_of_day(now.date() + relativedelta(months=1, day=31), now.tzinfo)


def _month_day(text: str, now: datetime) -> Optional[datetime]:
    m = MONTH_DAY_RE.search(text)
    if not m:
        return None
    month = int(m.group(1))
    day = int(m.group(2))

    # "2月30日" переезжает на март, как и у обычного конструктора даты
    d = date(now.year, 1, 1) + relativedelta(months=month - 1, days=day - 1)
    # с now сравнивается полночь даты без времени из фразы: сегодняшнее число уходит на следующий год
    if datetime.combine(d, time(0, 0), tzinfo=now.tzinfo) < now:
        d += relativedelta(years=1)
    return _on_day(text, d, now)


def _find_weekday(text: str) -> Optional[int]:
    for keyword, target in WEEKDAY_WORDS:
        if keyword in text:
            return target
    return None


def _weekday(text: str, now: datetime) -> Optional[datetime]:
    target = _find_weekday(text)
    if target is None:
        return None
    days_to_add = target - sunday_first_weekday(now.date())
    if days_to_add <= 0:
        days_to_add += 7
    return _on_day(text, now.date() + timedelta(days=days_to_add), now)


def _bare_clock(text: str, now: datetime) -> Optional[datetime]:
    return _on_day(text, now.date(), now, pm_heuristic=True)


Predicate = Callable[[str], bool]
Handler = Callable[[str, datetime], Optional[datetime]]


def _contains(*words: str) -> Predicate:
    return lambda text: any(w in text for w in words)


# Порядок важен: шаблоны пересекаются ("下周三" содержит "下周"), первый сработавший выигрывает.
DATE_RULES: List[Tuple[str, Predicate, Handler]] = [
    ("today", _contains("今天"), _relative_day(0, pm_heuristic=True)),
    ("tomorrow", _contains("明天"), _relative_day(1)),
    ("day_after_tomorrow", _contains("后天"), _relative_day(2)),
    ("this_week", _contains("本周", "这周"), _this_week),
    ("next_week", _contains("下周"), _next_week),
    ("this_month", _contains("本月", "这个月"), _this_month),
    ("next_month", _contains("下个月", "下月"), _next_month),
    ("month_day", lambda text: MONTH_DAY_RE.search(text) is not None, _month_day),
    ("weekday", lambda text: _find_weekday(text) is not None, _weekday),
    ("clock", lambda text: CLOCK_RE.search(text) is not None, _bare_clock),
]


def parse_datetime_from_text(text: str, *, now: datetime) -> Optional[datetime]:
    """
    Детерминированный разбор даты/времени из китайской фразы:
    - "今天/明天/后天" (+ "3点", "15:30") → конкретный день, без времени: 23:59:59.999
    - "本周/这周", "下周" → ближайшее / следующее воскресенье
    - "本月", "下个月" → последний день месяца
    - "5月20日" (+ время) → дата; если её полночь уже прошла, то следующий год
    - "周三/星期三/礼拜三" → следующий такой день (строго после сегодня)
    - голое "3点" → сегодня
    Возвращает datetime в TZ now.tzinfo или None.
    """
    if not text:
        return None

    for name, matches, handler in DATE_RULES:
        if not matches(text):
            continue
        result = handler(text, now)
        if result is not None:
            logger.debug("date rule %s matched %r -> %s", name, text, result.isoformat())
            return result
    return None
