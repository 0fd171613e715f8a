# src/task_parser.py
"""
Фасад разбора фразы пользователя.

Start → Classify → CreatePath | EditPath → Done.
Ровно один ParseOutcome на вызов; внешний экстрактор (если есть) опрашивается
только на пути создания и никогда не роняет разбор.
"""

import logging
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from attribute_extractor import extract_for_create, extract_for_edit, trim_edge_punct
from config import DEFAULT_OWNER_NAMES
from intent import Intent, classify_intent
from llm_client import ModelExtractor
from task_matching import MatchResult, extract_reference_name, find_matching_tasks, resolve_edit_target
from task_schema import (
    CandidateTask,
    CreateOutcome,
    EditAmbiguousOutcome,
    EditOutcome,
    ModelExtraction,
    ParseOutcome,
    TaskDraft,
)
from title_cleaner import clean_task_title, should_use_cleaned_title

logger = logging.getLogger(__name__)

# Ответ модели принимаем только строго выше этого порога
MODEL_CONFIDENCE_THRESHOLD = 0.7
RULES_CONFIDENCE = 0.8

_PRIORITIES = ("low", "medium", "high")

CandidateLike = Union[CandidateTask, Mapping[str, Any]]


def _coerce_candidates(candidates: Optional[Iterable[CandidateLike]]) -> List[CandidateTask]:
    if not candidates:
        return []
    return [c if isinstance(c, CandidateTask) else CandidateTask.model_validate(c) for c in candidates]


def _model_priority(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    value = value.strip().lower()
    return value if value in _PRIORITIES else None


class TaskParser:
    def __init__(
        self,
        extractor: Optional[ModelExtractor] = None,
        *,
        owner_names: Iterable[str] = DEFAULT_OWNER_NAMES,
    ):
        self.extractor = extractor
        self.owner_names = tuple(owner_names)

    def parse(
        self,
        text: str,
        candidates: Optional[Sequence[CandidateLike]] = None,
        *,
        now: datetime,
    ) -> ParseOutcome:
        """
        Args:
            text: исходная фраза пользователя
            candidates: существующие задачи (только чтение) для поиска цели правки
            now: текущее время; от него считаются все относительные даты
        """
        tasks = _coerce_candidates(candidates)
        intent = classify_intent(text)
        logger.debug("intent %s for %r (%d candidates)", intent.value, text, len(tasks))

        if intent is Intent.EDIT and tasks:
            return self._parse_edit(text, tasks, now)
        return self._parse_create(text, now)

    def suggest_matches(self, text: str, candidates: Optional[Sequence[CandidateLike]]) -> List[MatchResult]:
        """Ranked candidates for showing a choice to the user."""
        return find_matching_tasks(text, _coerce_candidates(candidates))

    def _parse_edit(self, text: str, tasks: List[CandidateTask], now: datetime) -> ParseOutcome:
        name = extract_reference_name(text)
        match = resolve_edit_target(name, tasks)
        updates = extract_for_edit(text, now=now)

        # Совпадение без единого изменения: скорее ложная правка, отдаём выбор пользователю
        if match is not None and updates.has_changes():
            logger.info(
                "edit resolved: %r -> task %s (similarity %.2f)",
                name, match.task.id, match.similarity,
            )
            return EditOutcome(task_id=match.task.id, updates=updates, confidence=match.similarity)

        logger.info(
            "edit ambiguous: name=%r matched=%s changes=%s",
            name, match is not None, updates.has_changes(),
        )
        return EditAmbiguousOutcome(updates=updates, candidates=tasks)

    def _parse_create(self, text: str, now: datetime) -> CreateOutcome:
        attrs = extract_for_create(text, now=now)

        extraction = self._try_model(text, now)
        if extraction is not None:
            draft = TaskDraft(
                title=trim_edge_punct(extraction.clean_title),
                description=attrs.description or extraction.description or None,
                priority=attrs.priority or _model_priority(extraction.priority),
                due_date=attrs.due_date,
                tags=attrs.tags,
            )
            return CreateOutcome(draft=draft, confidence=extraction.confidence, source="model")

        title = attrs.title
        cleaned = clean_task_title(title, self.owner_names)
        if should_use_cleaned_title(cleaned):
            logger.debug("title cleaned %r -> %r (removed %s)", title, cleaned.clean_title, cleaned.removed_patterns)
            title = cleaned.clean_title

        draft = TaskDraft(
            title=title,
            description=attrs.description,
            priority=attrs.priority,
            due_date=attrs.due_date,
            tags=attrs.tags,
        )
        return CreateOutcome(draft=draft, confidence=RULES_CONFIDENCE, source="rules")

    def _try_model(self, text: str, now: datetime) -> Optional[ModelExtraction]:
        if self.extractor is None:
            return None
        try:
            extraction = self.extractor.extract(text, now=now)
        except Exception:
            logger.warning("Model extractor raised, using rules", exc_info=True)
            return None
        if extraction is None:
            return None

        if extraction.confidence <= MODEL_CONFIDENCE_THRESHOLD or not trim_edge_punct(extraction.clean_title):
            logger.info(
                "Model extraction rejected (confidence %.2f, title %r), using rules",
                extraction.confidence, extraction.clean_title,
            )
            return None
        return extraction
