"""
Сборка query string в теле метода SDK.

Вложенные группы (filter[x], page[x]) читаются из объекта параметров по
camelCase ключу, а в запрос уходят под исходным именем из документа.
"""

from typing import Dict, List

from ..types.definitions import QueryParameter
from ..utils.field_utils import bracket_wire_name
from ..utils.naming import to_camel_case, ts_property_name, ts_string
from .param_generator import (
    CURRENCY_RANGE,
    DATE_RANGE,
    INCLUDE_GROUP,
    NUMBER_RANGE,
    PAGE_GROUP,
    SORT_GROUP,
    is_nested_group,
)
from .templates import Templates

RANGE_OPERATORS = (
    ("eq", "="),
    ("gte", ">="),
    ("lte", "<="),
    ("gt", ">"),
    ("lt", "<"),
)

RANGE_VARIABLES = {
    DATE_RANGE: "dateRange",
    NUMBER_RANGE: "numberRange",
    CURRENCY_RANGE: "currencyRange",
}


def defined(access: str) -> str:
    return f"{access} !== undefined && {access} !== null"


def member(obj: str, name: str) -> str:
    return f'{obj}["{name}"]'


def property_access(obj: str, name: str) -> str:
    """params.search или params["x-y"] для имён, не являющихся идентификаторами"""
    prop = ts_property_name(name)
    if prop.startswith("'"):
        return member(obj, to_camel_case(name))
    return f"{obj}.{prop}"


def block(condition: str, body: List[str]) -> List[str]:
    return [f"if ({condition}) {{"] + ["  " + line if line else "" for line in body] + ["}"]


class QueryStringBuilder:
    """Строки TypeScript, наполняющие URLSearchParams из params"""

    def __init__(self, groups: Dict[str, List[QueryParameter]], params_name: str = "params"):
        self.groups = groups
        self.params_name = params_name
        # Нужен ли классу приватный formatFilterValue
        self.uses_format_helper = False
        self.range_types = set()

    def build(self) -> List[str]:
        if not self.groups:
            return ["let finalUrl = url;"]

        lines = ["const queryString = new URLSearchParams();"]
        for group in sorted(self.groups):
            lines.extend(self.group_lines(group, self.groups[group]))
        lines.append(
            "let finalUrl = queryString.toString() ? `${url}?${queryString.toString()}` : url;"
        )
        return lines

    def group_lines(self, group: str, parameters: List[QueryParameter]) -> List[str]:
        access = property_access(self.params_name, group)

        if group == SORT_GROUP:
            return Templates.sort.format(access=access, wire=ts_string(parameters[0].name)).split("\n")

        if group == INCLUDE_GROUP:
            return Templates.include.format(access=access, wire=ts_string(parameters[0].name)).split(
                "\n"
            )

        if not is_nested_group(parameters):
            lines = []
            for param in parameters:
                lines.extend(
                    self.leaf(property_access(self.params_name, param.name), param, param.name)
                )
            return lines

        body = []
        for param in sorted(parameters, key=lambda p: to_camel_case(p.key)):
            field = member(access, to_camel_case(param.key))
            wire_name = bracket_wire_name(group, param.key)
            if group == PAGE_GROUP:
                body.extend(
                    block(
                        defined(field),
                        [f"queryString.append({ts_string(wire_name)}, String({field}));"],
                    )
                )
            else:
                body.extend(self.leaf(field, param, wire_name))
        return block(access, body)

    def leaf(self, access: str, param: QueryParameter, wire_name: str) -> List[str]:
        if param.sdk_type in RANGE_VARIABLES:
            return block(defined(access), self.range_lines(access, param, wire_name))

        self.uses_format_helper = True
        return block(
            defined(access),
            [
                f"const value = {access};",
                f"queryString.append({ts_string(wire_name)}, this.formatFilterValue(value));",
            ],
        )

    def range_lines(self, access: str, param: QueryParameter, wire_name: str) -> List[str]:
        """
        Границы диапазона: каждая как ``<op><value>``, min/max одной
        строкой ``<min>..<max>``, у валюты префикс ``<currency>:``.
        """
        variable = RANGE_VARIABLES[param.sdk_type]
        wire = ts_string(wire_name)
        lines = [f"const {variable} = {access};"]

        if param.sdk_type == DATE_RANGE:
            for bound, operator in RANGE_OPERATORS:
                value = f"{variable}.{bound}"
                lines.append(
                    f"if ({value}) {{ queryString.append({wire}, "
                    f"`{operator}${{{value}.toISOString()}}`); }}"
                )
            return lines

        self.range_types.add(param.sdk_type)
        lines.append(f"const range: {param.sdk_type} = {variable};")

        prefix = "${range.currency}:" if param.sdk_type == CURRENCY_RANGE else ""
        for bound, operator in RANGE_OPERATORS:
            lines.append(
                f"if (range.{bound} !== undefined) {{ queryString.append({wire}, "
                f"`{prefix}{operator}${{range.{bound}}}`); }}"
            )
        lines.extend(
            block(
                "range.min !== undefined || range.max !== undefined",
                [
                    "const valueStr = `${range.min ?? ''}..${range.max ?? ''}`;",
                    f"queryString.append({wire}, `{prefix}${{valueStr}}`);",
                ],
            )
        )
        return lines
