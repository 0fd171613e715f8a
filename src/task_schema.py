# src/task_schema.py
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


Priority = Literal["low", "medium", "high"]

DEFAULT_TITLE = "新任务"


class TaskDraft(BaseModel):
    """
    Готовый payload новой задачи.
    Создаётся заново на каждый вызов парсера и больше не меняется.
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(DEFAULT_TITLE, description="Минимальный заголовок задачи")
    description: Optional[str] = None
    priority: Optional[Priority] = None
    due_date: Optional[datetime] = None
    tags: Optional[List[str]] = None


class DueDateAction(str, Enum):
    UNSET = "unset"  # не трогать дедлайн
    CLEAR = "clear"  # снять дедлайн
    SET = "set"      # поставить новый дедлайн


class DueDateChange(BaseModel):
    """Tri-state change of the due date: leave it, clear it, or set it."""

    model_config = ConfigDict(frozen=True)

    action: DueDateAction = DueDateAction.UNSET
    value: Optional[datetime] = None

    @classmethod
    def unset(cls) -> "DueDateChange":
        return cls()

    @classmethod
    def clear(cls) -> "DueDateChange":
        return cls(action=DueDateAction.CLEAR)

    @classmethod
    def set_to(cls, value: datetime) -> "DueDateChange":
        return cls(action=DueDateAction.SET, value=value)

    @property
    def is_unset(self) -> bool:
        return self.action is DueDateAction.UNSET


class EditUpdate(BaseModel):
    """
    Частичное изменение существующей задачи.
    None у обычного поля = поле не упоминалось во фразе.
    """

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None
    tags: Optional[List[str]] = None
    due_date: DueDateChange = Field(default_factory=DueDateChange)

    def has_changes(self) -> bool:
        return bool(self.to_patch())

    def to_patch(self) -> Dict[str, Any]:
        """
        Wire shape for the task store: only detected fields are present,
        a cleared due date is present with a null value.
        """
        patch: Dict[str, Any] = {}
        for name in ("title", "description", "priority", "tags"):
            value = getattr(self, name)
            if value is not None:
                patch[name] = value
        if self.due_date.action is DueDateAction.SET:
            patch["due_date"] = self.due_date.value
        elif self.due_date.action is DueDateAction.CLEAR:
            patch["due_date"] = None
        return patch


class CandidateTask(BaseModel):
    """Существующая задача пользователя (только чтение)."""

    model_config = ConfigDict(frozen=True)

    id: Union[int, str]
    title: str
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    priority: Optional[Priority] = None


class CreateOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["create"] = "create"
    draft: TaskDraft
    confidence: float
    source: Literal["rules", "model"] = "rules"


class EditOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["edit"] = "edit"
    task_id: Union[int, str]
    updates: EditUpdate
    confidence: float


class EditAmbiguousOutcome(BaseModel):
    """Правка распознана, но задачу должен выбрать пользователь."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["edit_ambiguous"] = "edit_ambiguous"
    updates: EditUpdate
    candidates: List[CandidateTask]


ParseOutcome = Annotated[
    Union[CreateOutcome, EditOutcome, EditAmbiguousOutcome],
    Field(discriminator="kind"),
]


class ModelExtraction(BaseModel):
    """
    Ответ внешнего экстрактора (LLM).
    Проверяем только наличие обязательных полей, dueDate дальше не разбираем.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    clean_title: str = Field(..., alias="cleanTitle")
    description: Optional[str] = None
    priority: Optional[str] = None
    owner: Optional[str] = None
    due_date: Optional[Any] = Field(None, alias="dueDate")
    confidence: float = Field(..., description="Как вернула модель, без проверки диапазона")
