# src/task_matching.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from task_schema import CandidateTask


EDIT_VERBS = (
    "修改|更改|调整|编辑|改成|改为|改到|变成|换成|设置成|设为|"
    "延期|推迟|提前|移到|挪到|放到|改"
)

# "把写文档调整到明天" → "写文档"
_BA_RE = re.compile(rf"把(.+?)(?:{EDIT_VERBS}).*$")
# "推迟开会到下周" → "开会"
_VERB_FIRST_RE = re.compile(rf"(?:{EDIT_VERBS})(.+?)(?:到|成|为).*$")

NOISE_WORDS = frozenset({
    "把", "将", "给", "让", "请", "帮", "我", "要",
    "修改", "更改", "调整", "编辑", "改成", "变成", "换成", "改为", "设置成", "设为",
    "延期", "推迟", "提前",
    "到", "成", "为",
    "的", "了", "吧", "啊", "呢",
})

EDIT_TARGET_THRESHOLD = 0.4


@dataclass(frozen=True)
class MatchResult:
    task: CandidateTask
    confidence: float  # 0..100
    reason: str


@dataclass(frozen=True)
class NameMatch:
    task: CandidateTask
    similarity: float  # 0..1


def _normalize_text(s: str) -> str:
    s = (s or "").lower().strip()
    s = s.strip(" \t\r\n\"'«»“”„「」『』")
    s = re.sub(r"[^\w\s]+", " ", s, flags=re.UNICODE)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def extract_reference_name(text: str) -> str:
    """
    Достаёт из команды правки название задачи, о которой идёт речь.
    Сначала срезаем глагол/предлог ("把X改成…", "推迟X到…"), потом выкидываем служебные слова.
    """
    s = (text or "").strip()
    if not s:
        return ""

    m = _BA_RE.search(s) or _VERB_FIRST_RE.search(s)
    if m:
        s = m.group(1)

    tokens = [t for t in s.split() if t not in NOISE_WORDS]
    return " ".join(tokens)


def name_similarity(a: str, b: str) -> float:
    na = _normalize_text(a)
    nb = _normalize_text(b)
    if not na or not nb:
        return 0.0
    if na == nb:
        return 1.0
    if na in nb or nb in na:
        return 0.90

    a_tokens = na.split()
    b_tokens = nb.split()
    score = 0.0
    for x in a_tokens:
        if len(x) <= 1:
            continue
        for y in b_tokens:
            if len(y) <= 1:
                continue
            if x == y:
                score += 1.0
            elif x in y or y in x:
                score += 0.5
    return min(1.0, score / max(len(a_tokens), len(b_tokens)))


def rank_by_name(name: str, candidates: Iterable[CandidateTask]) -> List[NameMatch]:
    matches = [NameMatch(task=t, similarity=name_similarity(name, t.title)) for t in candidates]
    # sorted() стабилен: при равенстве остаётся исходный порядок
    return sorted(matches, key=lambda m: m.similarity, reverse=True)


def resolve_edit_target(
    name: str,
    candidates: Sequence[CandidateTask],
    *,
    threshold: float = EDIT_TARGET_THRESHOLD,
) -> Optional[NameMatch]:
    """
    Лучший кандидат строго выше порога; при равенстве берём первый встреченный.
    None → вызывающий код показывает пользователю весь список.
    """
    best: Optional[NameMatch] = None
    for task in candidates:
        score = name_similarity(name, task.title)
        if score <= threshold:
            continue
        if best is None or score > best.similarity:
            best = NameMatch(task=task, similarity=score)
    return best


def find_matching_tasks(text: str, tasks: Iterable[CandidateTask]) -> List[MatchResult]:
    """
    Полный скоринг задачи по фразе (заголовок, описание, теги) для выбора из голосовой команды.
    Задачи с нулевым счётом в результат не попадают.
    """
    lower = (text or "").lower().strip()
    if not lower:
        return []
    text_words = lower.split()

    scored = []
    for task in tasks:
        confidence = 0.0
        reasons: List[str] = []
        exact = False

        title = task.title.lower()
        if title == lower:
            confidence += 100
            reasons.append("标题完全匹配")
            exact = True
        elif title and (title in lower or lower in title):
            confidence += 80
            reasons.append("标题部分匹配")
        else:
            title_words = title.split()
            matching = [w for w in title_words if any(w in tw or tw in w for tw in text_words)]
            if matching:
                confidence += len(matching) / len(title_words) * 60
                reasons.append(f"关键词匹配({len(matching)}/{len(title_words)})")

        if task.description:
            desc = task.description.lower()
            if desc in lower or lower in desc:
                confidence += 30
                reasons.append("描述匹配")

        if task.tags:
            matching_tags = [tag for tag in task.tags if tag and tag.lower() in lower]
            if matching_tags:
                confidence += len(matching_tags) * 20
                reasons.append(f"标签匹配({', '.join(matching_tags)})")

        if confidence > 0:
            scored.append((exact, MatchResult(task=task, confidence=min(confidence, 100.0), reason=" | ".join(reasons))))

    # точное совпадение заголовка идёт первым даже при равных 100
    scored.sort(key=lambda item: (item[1].confidence, item[0]), reverse=True)
    return [result for _exact, result in scored]
