"""Утилиты для работы с именами query параметров и ссылок"""

import re
from typing import Optional, Tuple

_BRACKET_PARAM = re.compile(r"^([^\[\]]+)\[([^\[\]]+)\]$")
_PATH_PLACEHOLDER = re.compile(r"\{([^}]+)\}")


def parse_bracket_param(param_name: str) -> Tuple[str, str]:
    """
    Разбирает имя параметра вида ``base[key]``.

    Args:
        param_name: Имя параметра как в запросе (например, "filter[created_at]")

    Returns:
        Кортеж (группа, ключ) или ("", "") если имя не в скобочном формате

    Examples:
        >>> parse_bracket_param("filter[created_at]")
        ('filter', 'created_at')
        >>> parse_bracket_param("invalid-format")
        ('', '')
    """
    match = _BRACKET_PARAM.match(param_name)
    if not match:
        return "", ""
    return match.group(1), match.group(2)


def bracket_wire_name(group: str, key: str) -> str:
    """Обратная операция к parse_bracket_param"""
    return f"{group}[{key}]"


def ref_name(ref: Optional[str]) -> Optional[str]:
    """Имя схемы из $ref - последний сегмент пути"""
    if not ref:
        return None
    return ref.rsplit("/", 1)[-1]


def extract_path_params(path: str) -> list:
    """Плейсхолдеры пути в порядке появления: /items/{id} -> ['id']"""
    return _PATH_PLACEHOLDER.findall(path)
