"""
Простая подстановка полей модели {{field}} в шаблоне письма.
"""
import dataclasses
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel


def template_fields(model: Any) -> dict[str, Any]:
    """
    Объявленные поля модели: имя -> значение.

    Поддерживаются Mapping, pydantic-модели и экземпляры dataclass.
    Поля с префиксом "_" не публичные и пропускаются.
    """
    if isinstance(model, Mapping):
        items = dict(model)
    elif isinstance(model, BaseModel):
        items = {name: getattr(model, name) for name in type(model).model_fields}
    elif dataclasses.is_dataclass(model) and not isinstance(model, type):
        items = {f.name: getattr(model, f.name) for f in dataclasses.fields(model)}
    else:
        raise TypeError(f"Unsupported template model type: {type(model).__name__}")
    return {str(k): v for k, v in items.items() if not str(k).startswith("_")}


def render(template: str, model: Any = None) -> str:
    """
    Заменить каждое вхождение {{имя_поля}} на str(значение) для всех полей model.

    None в значении даёт пустую подстановку. Без рекурсии и экранирования:
    один проход по полям. Если model is None, шаблон возвращается как есть.
    """
    if model is None:
        return template
    for name, value in template_fields(model).items():
        template = template.replace("{{" + name + "}}", "" if value is None else str(value))
    return template
