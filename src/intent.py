# src/intent.py
import re
from enum import Enum


class Intent(str, Enum):
    CREATE = "create"  # создать новую задачу
    EDIT = "edit"      # изменить существующую задачу


# Любое совпадение = правка, порядок проверки на результат не влияет
EDIT_PATTERNS = (
    re.compile(r"修改|更改|调整|编辑"),
    re.compile(r"改成|变成|换成"),
    re.compile(r"从.+[到改]"),
    re.compile(r"设置成|设为"),
    re.compile(r"延期|推迟|提前"),
    re.compile(r"把.+[到改为]"),
)


def classify_intent(text: str) -> Intent:
    lower = (text or "").lower()
    if any(p.search(lower) for p in EDIT_PATTERNS):
        return Intent.EDIT
    return Intent.CREATE
