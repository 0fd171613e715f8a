"""Tests for the Chinese date/time extraction in time_utils."""

import os
import sys
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

# Add src to sys.path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from time_utils import detect_day_period, parse_clock, parse_datetime_from_text, sunday_first_weekday

# Monday
NOW = datetime(2024, 1, 1, 10, 0)


def eod(year, month, day):
    return datetime(year, month, day, 23, 59, 59, 999000)


class TestNoCue:
    """Text without any date/time cue."""

    @pytest.mark.parametrize("text", ["", "写文档", "买牛奶 紧急", "和阿伟讨论方案"])
    def test_returns_none(self, text):
        assert parse_datetime_from_text(text, now=NOW) is None


class TestRelativeDays:
    """今天 / 明天 / 后天 with optional clock."""

    def test_tomorrow_defaults_to_end_of_day(self):
        assert parse_datetime_from_text("明天", now=NOW) == eod(2024, 1, 2)

    def test_tomorrow_afternoon_is_pm(self):
        result = parse_datetime_from_text("明天下午3点", now=NOW)
        assert result == datetime(2024, 1, 2, 15, 0)

    def test_tomorrow_plain_clock_no_heuristic(self):
        assert parse_datetime_from_text("明天3点", now=NOW) == datetime(2024, 1, 2, 3, 0)

    def test_day_after_tomorrow_with_minutes(self):
        assert parse_datetime_from_text("后天10:30交报告", now=NOW) == datetime(2024, 1, 3, 10, 30)

    def test_today_without_clock(self):
        assert parse_datetime_from_text("今天完成", now=NOW) == eod(2024, 1, 1)

    def test_today_earlier_hour_assumed_pm(self):
        # 3 < 10 (текущий час) → 15:00
        assert parse_datetime_from_text("今天3点开会", now=NOW) == datetime(2024, 1, 1, 15, 0)

    def test_today_later_hour_kept(self):
        assert parse_datetime_from_text("今天11点开会", now=NOW) == datetime(2024, 1, 1, 11, 0)

    def test_today_explicit_morning_overrides_heuristic(self):
        assert parse_datetime_from_text("今天上午9点", now=NOW) == datetime(2024, 1, 1, 9, 0)

    def test_full_width_colon(self):
        assert parse_datetime_from_text("明天9：15", now=NOW) == datetime(2024, 1, 2, 9, 15)

    def test_today_checked_before_tomorrow(self):
        assert parse_datetime_from_text("今天或者明天", now=NOW) == eod(2024, 1, 1)


class TestWeeksAndMonths:
    """本周 / 下周 / 本月 / 下个月."""

    def test_this_week_is_upcoming_sunday(self):
        assert parse_datetime_from_text("本周完成", now=NOW) == eod(2024, 1, 7)

    def test_this_week_on_sunday_is_today(self):
        sunday = datetime(2024, 1, 7, 9, 0)
        assert parse_datetime_from_text("这周", now=sunday) == eod(2024, 1, 7)

    def test_next_week_is_sunday_after(self):
        assert parse_datetime_from_text("下周", now=NOW) == eod(2024, 1, 14)

    def test_next_week_on_sunday(self):
        sunday = datetime(2024, 1, 7, 9, 0)
        assert parse_datetime_from_text("下周", now=sunday) == eod(2024, 1, 14)

    def test_next_week_wins_over_weekday(self):
        # правила упорядочены: "下周" срабатывает раньше "周三"
        assert parse_datetime_from_text("下周三", now=NOW) == eod(2024, 1, 14)

    def test_this_month(self):
        assert parse_datetime_from_text("本月底前", now=NOW) == eod(2024, 1, 31)

    def test_next_month_leap_february(self):
        assert parse_datetime_from_text("下个月", now=NOW) == eod(2024, 2, 29)

    def test_next_month_from_month_end(self):
        now = datetime(2024, 1, 31, 12, 0)
        assert parse_datetime_from_text("下月", now=now) == eod(2024, 2, 29)


class TestMonthDay:
    """M月D日 / M月D号."""

    def test_month_day(self):
        assert parse_datetime_from_text("3月5日交", now=NOW) == eod(2024, 3, 5)

    def test_month_day_with_clock(self):
        assert parse_datetime_from_text("3月5号下午2点", now=NOW) == datetime(2024, 3, 5, 14, 0)

    def test_past_date_rolls_to_next_year(self):
        now = datetime(2024, 6, 10, 12, 0)
        assert parse_datetime_from_text("1月1日", now=now) == eod(2025, 1, 1)

    def test_today_by_date_rolls_to_next_year(self):
        """Today's date counts as past once midnight is behind now."""
        assert parse_datetime_from_text("1月1日", now=NOW) == eod(2025, 1, 1)

    def test_today_by_date_with_later_clock_still_rolls(self):
        assert parse_datetime_from_text("1月1日15点", now=NOW) == datetime(2025, 1, 1, 15, 0)

    def test_today_by_date_at_midnight_is_kept(self):
        midnight = datetime(2024, 1, 1, 0, 0)
        assert parse_datetime_from_text("1月1日", now=midnight) == eod(2024, 1, 1)

    def test_invalid_day_rolls_over_instead_of_raising(self):
        assert parse_datetime_from_text("2月30日", now=NOW) == eod(2024, 3, 1)


class TestWeekdays:
    """周X / 星期X / 礼拜X."""

    def test_next_wednesday(self):
        assert parse_datetime_from_text("周三开会", now=NOW) == eod(2024, 1, 3)

    def test_same_weekday_is_next_week(self):
        assert parse_datetime_from_text("星期一", now=NOW) == eod(2024, 1, 8)

    def test_sunday_families(self):
        for text in ("周日", "星期天", "礼拜日", "周天"):
            assert parse_datetime_from_text(text, now=NOW) == eod(2024, 1, 7)

    def test_weekday_with_clock(self):
        assert parse_datetime_from_text("礼拜五晚上8点", now=NOW) == datetime(2024, 1, 5, 20, 0)


class TestBareClock:
    """Clock without a date qualifier means today."""

    def test_earlier_hour_becomes_pm(self):
        assert parse_datetime_from_text("3点开会", now=NOW) == datetime(2024, 1, 1, 15, 0)

    def test_later_hour_kept(self):
        now = datetime(2024, 1, 1, 7, 0)
        assert parse_datetime_from_text("8点", now=now) == datetime(2024, 1, 1, 8, 0)

    def test_24h_clock(self):
        assert parse_datetime_from_text("15:30", now=NOW) == datetime(2024, 1, 1, 15, 30)

    def test_evening_word(self):
        assert parse_datetime_from_text("晚上8点", now=NOW) == datetime(2024, 1, 1, 20, 0)

    def test_noon(self):
        assert parse_datetime_from_text("中午12点", now=NOW) == datetime(2024, 1, 1, 12, 0)
        assert parse_datetime_from_text("中午1点", now=NOW) == datetime(2024, 1, 1, 13, 0)

    def test_morning_twelve_is_midnight(self):
        assert parse_datetime_from_text("上午12点", now=NOW) == datetime(2024, 1, 1, 0, 0)

    def test_evening_twelve_is_next_midnight(self):
        assert parse_datetime_from_text("晚上12点", now=NOW) == datetime(2024, 1, 2, 0, 0)
        assert parse_datetime_from_text("明天晚上12点", now=NOW) == datetime(2024, 1, 3, 0, 0)

    def test_afternoon_twelve_stays_noon(self):
        assert parse_datetime_from_text("明天下午12点", now=NOW) == datetime(2024, 1, 2, 12, 0)


class TestHelpers:
    def test_parse_clock(self):
        assert parse_clock("9点") == (9, 0)
        assert parse_clock("9点05") == (9, 5)
        assert parse_clock("没有时间") is None

    def test_detect_day_period(self):
        assert detect_day_period("明天下午") == "pm"
        assert detect_day_period("晚上") == "night"
        assert detect_day_period("中午") == "noon"
        assert detect_day_period("清晨") == "am"
        assert detect_day_period("明天") is None


def test_timezone_is_preserved():
    tz = ZoneInfo("Asia/Shanghai")
    now = datetime(2024, 1, 1, 10, 0, tzinfo=tz)
    result = parse_datetime_from_text("明天下午3点", now=now)
    assert result == datetime(2024, 1, 2, 15, 0, tzinfo=tz)
    assert result.tzinfo is tz


def test_deterministic_for_same_now():
    assert parse_datetime_from_text("周五3点", now=NOW) == parse_datetime_from_text("周五3点", now=NOW)


def test_sunday_first_weekday():
    assert sunday_first_weekday(datetime(2024, 1, 7).date()) == 0
    assert sunday_first_weekday(datetime(2024, 1, 1).date()) == 1
    assert sunday_first_weekday(datetime(2024, 1, 6).date()) == 6
