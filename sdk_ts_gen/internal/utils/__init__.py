"""Утилиты для генератора"""

from .field_utils import (
    bracket_wire_name,
    extract_path_params,
    parse_bracket_param,
    ref_name,
)
from .naming import to_camel_case, to_pascal_case, ts_property_name, ts_string
from .ordering import remove_duplicates, sorted_unique

__all__ = [
    "bracket_wire_name",
    "extract_path_params",
    "parse_bracket_param",
    "ref_name",
    "remove_duplicates",
    "sorted_unique",
    "to_camel_case",
    "to_pascal_case",
    "ts_property_name",
    "ts_string",
]
