import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from ..parser.schema_graph import SchemaGraph
from ..types.definitions import ParamDefinition, QueryParameter
from ..types.models import CodeFile, TsInterface, TsProperty, TsTypeAlias, indent_lines
from ..types.schema_resolver import TypeResolver
from ..utils.naming import to_camel_case, to_pascal_case, ts_property_name
from ..utils.ordering import remove_duplicates
from .templates import Templates

logger = logging.getLogger(__name__)

SDK_TYPE_EXTENSION = "x-gocart-sdk-type"

DATE_RANGE = "DateRange"
NUMBER_RANGE = "NumberRange"
CURRENCY_RANGE = "CurrencyRange"
RANGE_TYPES = (DATE_RANGE, NUMBER_RANGE, CURRENCY_RANGE)

SCALAR_HINTS = {
    "string": "string",
    "number": "number",
    "integer": "number",
    "boolean": "boolean",
    "date": "Date",
    "uuid": "string",
}

INCLUDE_GROUP = "include"
SORT_GROUP = "sort"
PAGE_GROUP = "page"
OPTION_GROUPS = (INCLUDE_GROUP, SORT_GROUP)

# FIXME: заглушка, пока include не описан enum во всех документах
INCLUDE_FALLBACK = ("parent", "parents", "children", "attributes")

TOTAL_COUNT_COMMENT = "Include the count of total items in the collection."


def extract_query_parameters(
    graph: SchemaGraph, path: str, operation: Dict[str, Any]
) -> List[QueryParameter]:
    """Query параметры операции в порядке объявления"""
    result = []
    for param in graph.parameters(path, operation):
        if param.get("in") != "query":
            continue
        hint = param.get(SDK_TYPE_EXTENSION)
        result.append(
            QueryParameter(
                name=param["name"],
                schema=param.get("schema"),
                required=bool(param.get("required")),
                description=(param.get("description") or "").strip(),
                sdk_type=str(hint) if hint else None,
            )
        )
    return result


def group_parameters(parameters: List[QueryParameter]) -> Dict[str, List[QueryParameter]]:
    """
    Группировка по префиксу: filter[a], filter[b] -> {"filter": [...]}.
    Параметр без скобок образует группу из одного элемента под своим именем.
    """
    groups: Dict[str, List[QueryParameter]] = {}
    for param in parameters:
        groups.setdefault(param.group, []).append(param)
    return groups


def interface_name(method: str, path: str, operation_id: Optional[str]) -> str:
    if operation_id:
        return to_pascal_case(operation_id) + "Params"
    return to_pascal_case(method.lower()) + to_pascal_case(re.sub(r"[^A-Za-z0-9]", "_", path)) + "Params"


def is_nested_group(parameters: List[QueryParameter]) -> bool:
    return any(p.is_bracketed for p in parameters)


class ParamGenerator:
    """Генерация params.ts: интерфейсы параметров GET операций"""

    def __init__(self, graph: SchemaGraph, resolver: Optional[TypeResolver] = None):
        self.graph = graph
        self.resolver = resolver or TypeResolver(graph)

    def get_param_definitions(self) -> List[ParamDefinition]:
        definitions = []
        for path in self.graph.paths():
            for method, operation in self.graph.operations(path):
                if method != "GET":
                    continue
                operation_id = operation.get("operationId") or ""
                definitions.append(
                    ParamDefinition(
                        name=interface_name(method, path, operation_id),
                        operation_id=operation_id,
                        path=path,
                        groups=group_parameters(
                            extract_query_parameters(self.graph, path, operation)
                        ),
                    )
                )
        return sorted(definitions, key=lambda definition: definition.name)

    def field_type(self, param: QueryParameter) -> str:
        """Тип поля: подсказка x-gocart-sdk-type важнее схемы"""
        if param.sdk_type:
            if param.sdk_type in RANGE_TYPES:
                return param.sdk_type
            return SCALAR_HINTS.get(param.sdk_type.lower(), param.sdk_type)

        field_type = self.resolver.type_of(param.schema)
        if self.is_nullable(param):
            field_type += " | null"
        return field_type

    def is_nullable(self, param: QueryParameter) -> bool:
        schema = self.graph.deref(param.schema)
        return isinstance(schema, dict) and bool(schema.get("nullable"))

    def option_values(self, group: str, parameters: List[QueryParameter]) -> Optional[List[str]]:
        """Значения enum для include/sort из схемы параметра или её items"""
        values = []
        for param in parameters:
            schema = self.graph.deref(param.schema)
            if not isinstance(schema, dict):
                continue
            enum = schema.get("enum")
            if not enum:
                items = self.graph.deref(schema.get("items"))
                enum = items.get("enum") if isinstance(items, dict) else None
            values.extend(str(v) for v in enum or [])

        if values:
            return remove_duplicates(values)
        if group == INCLUDE_GROUP:
            logger.debug("include parameter without enum, using fallback relationship names")
            return list(INCLUDE_FALLBACK)
        return None

    def render_definition(self, definition: ParamDefinition) -> Tuple[TsInterface, List[TsTypeAlias]]:
        properties = []
        side_types = []

        for group in sorted(definition.groups):
            parameters = definition.groups[group]

            if group in OPTION_GROUPS:
                values = self.option_values(group, parameters)
                resolved = self.resolver.resolve(
                    {"type": "array", "items": {"type": "string", "enum": values}},
                    alias=f"{definition.name}{to_pascal_case(group)}Option",
                )
                side_types.extend(resolved.side_types)
                properties.append(
                    TsProperty(
                        name=ts_property_name(group),
                        type=resolved.name,
                        comment=f"{to_pascal_case(group)} for the API.",
                    )
                )
                continue

            if is_nested_group(parameters):
                properties.append(
                    TsProperty(
                        name=ts_property_name(group),
                        type=self._nested_type(parameters),
                        comment=f"{to_pascal_case(group)} for the API.",
                    )
                )
                continue

            for param in parameters:
                properties.append(
                    TsProperty(
                        name=ts_property_name(param.name),
                        type=self.field_type(param),
                        optional=not param.required,
                        comment=param.description or None,
                    )
                )

        if definition.is_list:
            properties.append(
                TsProperty(name="totalCount", type="boolean", comment=TOTAL_COUNT_COMMENT)
            )

        return TsInterface(name=definition.name, properties=properties, spaced=True), side_types

    def _nested_type(self, parameters: List[QueryParameter]) -> str:
        fields = [
            TsProperty(
                name=ts_property_name(param.key),
                type=self.field_type(param),
                optional=not param.required,
                comment=param.description or None,
            )
            for param in sorted(parameters, key=lambda p: to_camel_case(p.key))
        ]
        body = "\n\n".join(f.render(0) for f in fields)
        return "{\n" + indent_lines(body) + "\n}"

    def generate(self, definitions: List[ParamDefinition]) -> CodeFile:
        code_file = CodeFile(file_name="params.ts", header=[Templates.params_header])
        code_file.add_block(Templates.shared_params)

        side_types: Dict[str, TsTypeAlias] = {}
        for definition in definitions:
            interface, aliases = self.render_definition(definition)
            code_file.add_block(interface)
            for alias in aliases:
                side_types.setdefault(alias.name, alias)

        for name in sorted(side_types):
            code_file.add_block(side_types[name])
        return code_file
