"""
Модуль форматирования даты по шаблону.

Шаблон строится из токенов (YYYY, MM, DD, HH, mm, ss ...), всё остальное
копируется как есть. Текст в квадратных скобках считается литералом:
"[IMG]_YYYYMMDD" -> "IMG_20230501".
"""

import re
from datetime import datetime
from typing import Callable, Dict, List


class LayoutError(ValueError):
    """Исключение для некорректного шаблона даты."""
    pass


# Порядок важен: длинные токены должны совпадать раньше коротких
_TOKENS: Dict[str, Callable[[datetime], str]] = {
    'YYYY': lambda dt: f"{dt.year:04d}",
    'YY': lambda dt: f"{dt.year % 100:02d}",
    'MMMM': lambda dt: dt.strftime('%B'),
    'MMM': lambda dt: dt.strftime('%b'),
    'MM': lambda dt: f"{dt.month:02d}",
    'DD': lambda dt: f"{dt.day:02d}",
    'dddd': lambda dt: dt.strftime('%A'),
    'ddd': lambda dt: dt.strftime('%a'),
    'HH': lambda dt: f"{dt.hour:02d}",
    'hh': lambda dt: f"{(dt.hour % 12) or 12:02d}",
    'mm': lambda dt: f"{dt.minute:02d}",
    'ss': lambda dt: f"{dt.second:02d}",
    'SSS': lambda dt: f"{dt.microsecond // 1000:03d}",
}

_TOKEN_RE = re.compile(
    r"\[[^\]]*\]|" + "|".join(re.escape(token) for token in _TOKENS)
)


def _is_literal(part: str) -> bool:
    return len(part) >= 2 and part.startswith('[') and part.endswith(']')


def tokenize(layout: str) -> List[str]:
    """
    Разбивает шаблон на токены и литералы.

    Args:
        layout: Шаблон даты

    Returns:
        List[str]: Части шаблона в исходном порядке
    """
    parts = []
    position = 0
    for match in _TOKEN_RE.finditer(layout):
        if match.start() > position:
            parts.append(layout[position:match.start()])
        parts.append(match.group(0))
        position = match.end()
    if position < len(layout):
        parts.append(layout[position:])
    return parts


def validate_layout(layout: str) -> None:
    """
    Проверяет, что шаблон содержит хотя бы один токен даты.

    Raises:
        LayoutError: Если шаблон пустой, содержит незакрытую скобку
            или не содержит ни одного токена
    """
    if not layout:
        raise LayoutError("Шаблон даты не может быть пустым")

    parts = tokenize(layout)
    for part in parts:
        if part in _TOKENS or _is_literal(part):
            continue
        if '[' in part:
            raise LayoutError(f"Незакрытая скобка в шаблоне: {layout}")
    if not any(part in _TOKENS for part in parts):
        raise LayoutError(f"Шаблон не содержит токенов даты: {layout}")


def format_time(dt: datetime, layout: str) -> str:
    """
    Форматирует дату по шаблону.

    Args:
        dt: Дата для форматирования
        layout: Шаблон, например "YYYY/MM" или "YYYYMMDD_HHmmss"

    Returns:
        str: Отформатированная строка
    """
    rendered = []
    for part in tokenize(layout):
        if part in _TOKENS:
            rendered.append(_TOKENS[part](dt))
        elif _is_literal(part):
            rendered.append(part[1:-1])
        else:
            rendered.append(part)
    return ''.join(rendered)
