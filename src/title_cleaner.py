# src/title_cleaner.py
"""
Второй проход по заголовку: вырезает из текста всё, что является метаданными
(приоритет, даты/время, исполнитель, метки полей), и оставляет минимальный заголовок.

Работает чисто по тексту и не зависит от структурных экстракторов.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

from config import DEFAULT_OWNER_NAMES

PRIORITY_KEYWORDS = (
    "紧急", "重要", "高优先级", "高优",
    "中等", "普通", "中优先级", "中优",
    "低优先级", "低优", "不急",
)

_PERIOD = r"上午|下午|早上|晚上|傍晚|中午|清晨"

DATE_PATTERNS: Sequence[re.Pattern[str]] = (
    re.compile(r"\d{1,2}月\d{1,2}[日号]"),
    re.compile(rf"(?:明天|今天|后天)?\s*(?:{_PERIOD})\s*\d{{1,2}}[点:：](?:\d{{1,2}})?"),
    re.compile(rf"\d{{1,2}}[点:：](?:\d{{1,2}})?\s*(?:{_PERIOD})?"),
    re.compile(r"(?:本周|这周|下周)(?:周?[一二三四五六日天])?"),
    re.compile(r"周[一二三四五六日天]|星期[一二三四五六日天]|礼拜[一二三四五六日天]"),
    re.compile(r"明天"),
    re.compile(r"今天"),
    re.compile(r"后天"),
    re.compile(r"本月|这个月"),
    re.compile(r"下个月|下月"),
    re.compile(_PERIOD),
)

CONTEXT_KEYWORDS = (
    "负责人:", "负责人：",
    "截止", "截止时间", "截止日期",
    "时间:", "时间：",
    "日期:", "日期：",
    "标签:", "标签：",
    "分类:", "分类：",
    "类别:", "类别：",
    "详情:", "详情：",
    "描述:", "描述：",
    "说明:", "说明：",
    "备注:", "备注：",
)

_PRIORITY_RE = re.compile("|".join(re.escape(k) for k in PRIORITY_KEYWORDS), re.IGNORECASE)
_SEPARATORS_RE = re.compile(r"[\s，,、]+")


@dataclass(frozen=True)
class CleanTitleResult:
    clean_title: str
    removed_patterns: List[str] = field(default_factory=list)
    confidence: float = 0.0


def _mask(pattern: re.Pattern[str], text: str, removed: List[str]) -> str:
    found = [m.group(0) for m in pattern.finditer(text)]
    if not found:
        return text
    removed.extend(found)
    return pattern.sub(" ", text)


def calculate_confidence(original: str, cleaned: str) -> float:
    if not cleaned:
        return 0.0
    if original == cleaned:
        return 0.5

    length_ratio = len(cleaned) / len(original)
    if length_ratio < 0.2:
        return 0.3
    if length_ratio < 0.4:
        return 0.6
    if length_ratio < 0.7:
        return 0.8
    return 0.9


def clean_task_title(raw_text: str, owner_names: Iterable[str] = DEFAULT_OWNER_NAMES) -> CleanTitleResult:
    original = (raw_text or "").strip()
    removed: List[str] = []

    text = _mask(_PRIORITY_RE, original, removed)

    for pattern in DATE_PATTERNS:
        text = _mask(pattern, text, removed)

    for owner in owner_names:
        if owner and owner in text:
            removed.extend([owner] * text.count(owner))
            text = text.replace(owner, " ")

    # убираем только саму метку, значение поля остаётся в заголовке
    for keyword in CONTEXT_KEYWORDS:
        while keyword in text:
            removed.append(keyword)
            text = text.replace(keyword, " ", 1)

    cleaned = _SEPARATORS_RE.sub(" ", text).strip()
    confidence = calculate_confidence(original, cleaned)

    return CleanTitleResult(
        clean_title=cleaned or original,
        removed_patterns=removed,
        confidence=confidence,
    )


def should_use_cleaned_title(result: CleanTitleResult) -> bool:
    """False → caller keeps the unmodified title."""
    if len(result.clean_title) < 2:
        return False
    if result.confidence < 0.3:
        return False
    if not result.removed_patterns:
        return False
    return True
