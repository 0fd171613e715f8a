# src/llm_client.py

import json
import logging
import re
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from openai import OpenAI
from pydantic import ValidationError

from cache import TTLCache
from config import DEFAULT_OWNER_NAMES, Settings
from prompts import get_extraction_system_prompt
from task_schema import ModelExtraction

logger = logging.getLogger(__name__)

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?|\n?```\s*$")
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


class ExtractorUnavailable(RuntimeError):
    """Model extractor cannot be built (no API key configured)."""


def _decode_json(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Модель иногда заворачивает JSON в ```json ... ``` или добавляет текст вокруг.
    Возвращает dict или None.
    """
    if not raw or not raw.strip():
        return None
    text = _CODE_FENCE_RE.sub("", raw.strip())
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        m = _JSON_OBJECT_RE.search(text)
        if not m:
            return None
        try:
            data = json.loads(m.group(0))
        except json.JSONDecodeError:
            return None
    return data if isinstance(data, dict) else None


class ModelExtractor:
    """
    Тонкий адаптер над внешним экстрактором (OpenAI-совместимый chat completions).
    Любая ошибка → None: решение о fallback принимает парсер.
    """

    def __init__(
        self,
        client: OpenAI,
        model: str,
        *,
        cache: Optional[TTLCache] = None,
        owner_names: Iterable[str] = DEFAULT_OWNER_NAMES,
    ):
        self.client = client
        self.model = model
        self.cache = cache
        self.owner_names = tuple(owner_names)

    def extract(self, text: str, *, now: datetime) -> Optional[ModelExtraction]:
        if self.cache is not None:
            cached = self.cache.get(text)
            if cached is not None:
                logger.debug("Model extraction cache hit for %r", text)
                return cached

        system_prompt = get_extraction_system_prompt(now.isoformat(), self.owner_names)

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=0,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": text},
                ],
            )
            raw = response.choices[0].message.content
        except Exception:
            logger.warning("Model extraction request failed for %r", text, exc_info=True)
            return None

        logger.info("LLM Raw Extraction Response: %s", raw)
        data = _decode_json(raw)
        if data is None:
            logger.warning("Failed to decode extraction JSON: %r", raw)
            return None

        try:
            result = ModelExtraction.model_validate(data)
        except ValidationError:
            logger.warning("Extraction JSON misses required fields: %r", data)
            return None

        if self.cache is not None:
            self.cache.set(text, result)
        return result


def build_model_extractor(settings: Settings, cache: Optional[TTLCache] = None) -> ModelExtractor:
    """Создаёт экстрактор из настроек; без ключа бросает ExtractorUnavailable."""
    if not settings.openai_api_key:
        raise ExtractorUnavailable("OPENAI_API_KEY не найден в .env")

    client = OpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        timeout=settings.llm_timeout_seconds,
        max_retries=0,
    )
    return ModelExtractor(
        client,
        settings.openai_model,
        cache=cache,
        owner_names=settings.owner_names,
    )
