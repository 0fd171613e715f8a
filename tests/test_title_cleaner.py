"""Tests for the title cleaner."""

import os
import sys

import pytest

# Add src to sys.path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from title_cleaner import (
    CleanTitleResult,
    calculate_confidence,
    clean_task_title,
    should_use_cleaned_title,
)


class TestCleanTaskTitle:
    def test_date_and_priority_removed(self):
        result = clean_task_title("明天完成设计稿，高优先级")
        assert result.clean_title == "完成设计稿"
        assert "高优先级" in result.removed_patterns
        assert "明天" in result.removed_patterns
        assert result.confidence == 0.8

    def test_owner_and_context_label(self):
        result = clean_task_title("负责人：choco 写周报")
        assert result.clean_title == "写周报"
        assert result.removed_patterns == ["choco", "负责人："]

    def test_full_metadata_phrase(self):
        result = clean_task_title("紧急 明天下午3点开会 阿伟")
        assert result.clean_title == "开会"
        assert result.removed_patterns == ["紧急", "明天下午3点", "阿伟"]
        # 2 из 14 символов осталось
        assert result.confidence == 0.3
        assert should_use_cleaned_title(result)

    def test_nothing_to_remove(self):
        result = clean_task_title("买牛奶")
        assert result.clean_title == "买牛奶"
        assert result.removed_patterns == []
        assert result.confidence == 0.5
        assert not should_use_cleaned_title(result)

    def test_everything_removed_falls_back_to_original(self):
        result = clean_task_title("明天 紧急")
        assert result.clean_title == "明天 紧急"
        assert result.confidence == 0.0
        assert not should_use_cleaned_title(result)

    def test_owner_counted_per_occurrence(self):
        result = clean_task_title("阿伟和阿伟开会")
        assert result.removed_patterns.count("阿伟") == 2
        assert result.clean_title == "和 开会"

    def test_custom_owner_names(self):
        result = clean_task_title("小明 写周报", owner_names=("小明",))
        assert result.clean_title == "写周报"
        assert clean_task_title("阿伟 写周报", owner_names=()).clean_title == "阿伟 写周报"

    def test_field_value_survives(self):
        result = clean_task_title("整理文件 备注：带U盘")
        assert result.clean_title == "整理文件 带U盘"

    @pytest.mark.parametrize(
        "text",
        [
            "明天完成设计稿，高优先级",
            "负责人：choco 写周报",
            "紧急 明天下午3点开会 阿伟",
            "下周三 和客户 沟通需求",
        ],
    )
    def test_idempotent(self, text):
        once = clean_task_title(text).clean_title
        assert clean_task_title(once).clean_title == once


class TestConfidence:
    @pytest.mark.parametrize(
        "original,cleaned,expected",
        [
            ("abc", "", 0.0),
            ("abc", "abc", 0.5),
            ("a" * 10, "a", 0.3),
            ("a" * 10, "aaa", 0.6),
            ("a" * 10, "aaaaa", 0.8),
            ("a" * 10, "aaaaaaaa", 0.9),
        ],
    )
    def test_ratio_table(self, original, cleaned, expected):
        assert calculate_confidence(original, cleaned) == expected


class TestShouldUse:
    def test_too_short(self):
        assert not should_use_cleaned_title(CleanTitleResult("会", ["明天"], 0.9))

    def test_low_confidence(self):
        assert not should_use_cleaned_title(CleanTitleResult("开会", ["明天"], 0.0))

    def test_accepted(self):
        assert should_use_cleaned_title(CleanTitleResult("开会", ["明天"], 0.8))
