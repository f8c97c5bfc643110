"""Детерминированный порядок и коллекции без дубликатов"""

from typing import Hashable, Iterable, List, TypeVar

T = TypeVar("T", bound=Hashable)


def remove_duplicates(items: Iterable[T]) -> List[T]:
    """Удаляет повторы, сохраняя первое вхождение"""
    seen = set()
    result = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


def sorted_unique(items: Iterable[str]) -> List[str]:
    return sorted(set(items))
