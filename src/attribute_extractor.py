# src/attribute_extractor.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from task_schema import DEFAULT_TITLE, DueDateChange, EditUpdate, Priority
from time_utils import parse_datetime_from_text

logger = logging.getLogger(__name__)


# Проверяем по порядку: high → medium → low, первый найденный набор выигрывает
PRIORITY_KEYWORDS: Tuple[Tuple[Priority, Tuple[str, ...]], ...] = (
    ("high", ("紧急", "重要", "高优先级")),
    ("medium", ("中等", "普通")),
    ("low", ("低优先级", "不急")),
)

TAG_LABELS = ("标签", "分类", "类别")
DESCRIPTION_LABELS = ("详情", "描述", "说明", "备注")
TITLE_LABELS = ("标题", "名称", "改成", "变成", "叫")

CLEAR_DUE_RE = re.compile(r"清除时间|取消时间|删除时间")

_EDGE_PUNCT_RE = re.compile(r"^[，,、\s]+|[，,、\s]+$")
_DESCRIPTION_LEAD = ("是", "：", ":")


def _tag_segment_re(label: str) -> re.Pattern[str]:
    return re.compile(re.escape(label) + r"\s*[:：]?\s*([^，,、]*)")


_TAG_SEGMENTS = tuple((label, _tag_segment_re(label)) for label in TAG_LABELS)


@dataclass(frozen=True)
class CreateAttributes:
    title: str
    description: Optional[str] = None
    priority: Optional[Priority] = None
    due_date: Optional[datetime] = None
    tags: Optional[List[str]] = None


def trim_edge_punct(s: str) -> str:
    return _EDGE_PUNCT_RE.sub("", s or "").strip()


def extract_priority(text: str) -> Optional[Priority]:
    if not text:
        return None
    lower = text.lower()
    for level, keywords in PRIORITY_KEYWORDS:
        if any(k in lower for k in keywords):
            return level
    return None


def extract_tags(text: str) -> List[str]:
    """
    "标签工作，明天" → ["工作"].
    Каждая метка (标签/分类/类别) даёт не больше одного тега, теги идут в порядке меток.
    """
    tags: List[str] = []
    if not text:
        return tags
    for _label, pattern in _TAG_SEGMENTS:
        m = pattern.search(text)
        if not m:
            continue
        value = m.group(1).strip()
        if value:
            tags.append(value)
    return tags


def _strip_tag_segments(text: str) -> str:
    for _label, pattern in _TAG_SEGMENTS:
        text = pattern.sub(" ", text, count=1)
    return text


def _split_description(text: str) -> Tuple[str, Optional[str]]:
    """Делит фразу по первой найденной метке описания: (кандидат в заголовок, описание)."""
    for label in DESCRIPTION_LABELS:
        idx = text.find(label)
        if idx == -1:
            continue
        description = text[idx + len(label):].strip()
        if description.startswith(_DESCRIPTION_LEAD):
            description = description[1:].strip()
        return text[:idx].strip(), description
    return text, None


def extract_for_create(text: str, *, now: datetime) -> CreateAttributes:
    raw = (text or "").strip()

    title, description = _split_description(raw)
    title = trim_edge_punct(_strip_tag_segments(title))
    tags = extract_tags(raw)

    return CreateAttributes(
        title=title or DEFAULT_TITLE,
        description=description,
        priority=extract_priority(raw),
        due_date=parse_datetime_from_text(raw, now=now),
        tags=tags or None,
    )


def _extract_new_title(text: str) -> Optional[str]:
    for label in TITLE_LABELS:
        idx = text.find(label)
        if idx == -1:
            continue
        title = text[idx + len(label):].strip()
        # "改成周报 标签工作": всё начиная с метки тега/описания к заголовку не относится
        cut = [title.find(kw) for kw in TAG_LABELS + DESCRIPTION_LABELS]
        cut = [i for i in cut if i != -1]
        if cut:
            title = title[: min(cut)]
        title = trim_edge_punct(title)
        return title or None
    return None


def extract_for_edit(text: str, *, now: datetime) -> EditUpdate:
    """
    Только то, что явно прозвучало во фразе.
    "清除时间/取消时间/删除时间" перекрывает любую найденную дату.
    """
    raw = (text or "").strip()

    due_date = DueDateChange.unset()
    parsed = parse_datetime_from_text(raw, now=now)
    if parsed is not None:
        due_date = DueDateChange.set_to(parsed)
    if CLEAR_DUE_RE.search(raw):
        due_date = DueDateChange.clear()

    _title, description = _split_description(raw)
    tags = extract_tags(raw)

    updates = EditUpdate(
        title=_extract_new_title(raw),
        description=description or None,
        priority=extract_priority(raw),
        tags=tags or None,
        due_date=due_date,
    )
    logger.debug("edit updates for %r: %s", raw, updates.to_patch())
    return updates
