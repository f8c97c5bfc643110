"""Преобразование регистра имен для TypeScript идентификаторов"""

import re

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def _upper_first(part: str) -> str:
    return part[:1].upper() + part[1:]


def to_camel_case(name: str) -> str:
    """
    snake_case -> camelCase. Префиксы вроде "-" у значений sort сохраняются.

    Examples:
        >>> to_camel_case("created_at")
        'createdAt'
        >>> to_camel_case("_embedded")
        'embedded'
        >>> to_camel_case("ID")
        'id'
    """
    if not name:
        return ""

    # Ведущее подчеркивание отбрасываем (только одно)
    if name[0] == "_":
        name = name[1:]

    parts = [p for p in re.split(r"[_\s]", name) if p]
    if not parts:
        return ""

    first = parts[0]
    if first.isupper():
        first = first.lower()
    else:
        first = first[:1].lower() + first[1:]

    return first + "".join(_upper_first(p) for p in parts[1:])


def to_pascal_case(name: str) -> str:
    """
    Любое имя -> PascalCase, аббревиатуры (UUID, ID) сохраняются.

    Examples:
        >>> to_pascal_case("item_list")
        'ItemList'
        >>> to_pascal_case("createItemRequest")
        'CreateItemRequest'
        >>> to_pascal_case("GET")
        'GET'
    """
    parts = []
    for part in re.split(r"[^A-Za-z0-9]", name):
        if not part:
            continue
        if part.isupper() and len(part) > 1:
            parts.append(part)
        else:
            parts.append(_upper_first(part))
    return "".join(parts)


def ts_property_name(name: str) -> str:
    """Имя свойства интерфейса: camelCase, в кавычках если не идентификатор"""
    camel = to_camel_case(name)
    if _IDENTIFIER.match(camel):
        return camel
    return "'" + camel.replace("'", "\\'") + "'"


def ts_string(value: str, quote: str = "'") -> str:
    """Строковый литерал TypeScript"""
    escaped = value.replace("\\", "\\\\").replace(quote, "\\" + quote)
    return f"{quote}{escaped}{quote}"
