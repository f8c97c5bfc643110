import datetime
import json
import logging
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from ..parser.schema_graph import SchemaGraph
from ..utils.naming import to_camel_case, to_pascal_case, ts_property_name
from ..utils.ordering import remove_duplicates
from .models import TsInterface, TsProperty, TsTypeAlias

logger = logging.getLogger(__name__)

# Тип, который не сужает значение
ANY_TYPE = "any"

TYPE_MAPPING = {
    "integer": "number",
    "number": "number",
    "string": "string",
    "boolean": "boolean",
    "object": ANY_TYPE,
    "null": "null",
}

EMBEDDED_PROPERTY = "_embedded"


class ResolvedType(NamedTuple):
    name: str
    side_types: Tuple[TsTypeAlias, ...] = ()


def declared_types(schema: Dict[str, Any]) -> List[str]:
    """``type`` схемы как список (строка в 3.0, список в 3.1)"""
    value = schema.get("type")
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(v) for v in value]
    return []


def is_object_schema(schema: Any) -> bool:
    if not isinstance(schema, dict) or schema.get("enum"):
        return False
    return "object" in declared_types(schema) or bool(schema.get("properties"))


def literal(value: Any, quote: str = "'", camel_case: bool = False) -> str:
    """Литерал TypeScript для значения enum/const"""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        text = to_camel_case(value) if camel_case else value
        return quote + text.replace("\\", "\\\\").replace(quote, "\\" + quote) + quote
    if isinstance(value, (datetime.date, datetime.datetime)):
        # YAML без кавычек отдает даты объектами
        return literal(value.isoformat(), quote, camel_case=False)
    text = json.dumps(value, sort_keys=True, default=str)
    return quote + text.replace(quote, "\\" + quote) + quote


def wrap_union(type_name: str) -> str:
    """Скобки вокруг union/intersection перед суффиксом [] или в intersection"""
    if " | " in type_name or " & " in type_name:
        return f"({type_name})"
    return type_name


class TypeResolver:
    """
    Преобразование узлов схем в выражения типов TypeScript.

    Именованные ссылки никогда не раскрываются, поэтому циклы между схемами
    components не приводят к бесконечной рекурсии.
    """

    def __init__(self, graph: SchemaGraph):
        self.graph = graph

    def resolve(
        self, schema: Any, dates_as_date: bool = False, alias: Optional[str] = None
    ) -> ResolvedType:
        """
        Args:
            schema: Узел схемы (может быть $ref)
            dates_as_date: date-time -> Date (типизация ответов методов)
            alias: Имя для inline enum (или массива inline enum). Без него
                enum рендерится прямо в выражении типа

        Returns:
            Имя типа и новые именованные типы, которые надо объявить
        """
        if alias and isinstance(schema, dict) and "$ref" not in schema:
            if schema.get("enum"):
                enum_alias = TsTypeAlias(name=alias, value=self.inline_enum(schema["enum"]))
                return ResolvedType(alias, (enum_alias,))

            items = schema.get("items")
            is_array = "array" in declared_types(schema) and isinstance(items, dict)
            if is_array and "$ref" not in items and items.get("enum"):
                item_alias = TsTypeAlias(name=alias, value=self.inline_enum(items["enum"]))
                return ResolvedType(f"{alias}[]", (item_alias,))

        return ResolvedType(self.type_of(schema, dates_as_date))

    def type_of(self, schema: Any, dates_as_date: bool = False) -> str:
        if schema is None or schema is True:
            return ANY_TYPE
        if schema is False:
            return "never"

        name = self.graph.ref_name(schema)
        if name:
            return to_pascal_case(name)

        if not isinstance(schema, dict):
            logger.debug(f"Unsupported schema node {schema!r}, falling back to {ANY_TYPE}")
            return ANY_TYPE

        if schema.get("enum"):
            return self.inline_enum(schema["enum"])

        if "const" in schema:
            return literal(schema["const"])

        for keyword, separator in (("oneOf", " | "), ("anyOf", " | "), ("allOf", " & ")):
            variants = schema.get(keyword)
            if variants:
                return self._composition(variants, separator, dates_as_date)

        types = declared_types(schema)
        if not types:
            if schema.get("properties") or schema.get("additionalProperties"):
                types = ["object"]
            elif "items" in schema:
                types = ["array"]
            else:
                logger.debug(f"Schema without type {sorted(schema)}, falling back to {ANY_TYPE}")
                return ANY_TYPE

        rendered = [self._single_type(t, schema, dates_as_date) for t in types]
        return " | ".join(remove_duplicates(rendered))

    @staticmethod
    def inline_enum(values: List[Any]) -> str:
        return " | ".join(remove_duplicates(literal(v, camel_case=True) for v in values))

    @staticmethod
    def named_enum(values: List[Any]) -> str:
        return " | ".join(remove_duplicates(literal(v, quote='"') for v in values))

    def _composition(self, variants: List[Any], separator: str, dates_as_date: bool) -> str:
        rendered = remove_duplicates(self.type_of(v, dates_as_date) for v in variants)
        if len(rendered) == 1:
            return rendered[0]
        if separator == " & ":
            rendered = [wrap_union(r) for r in rendered]
        return separator.join(rendered)

    def _single_type(self, type_name: str, schema: Dict[str, Any], dates_as_date: bool) -> str:
        type_name = type_name.lower()

        if type_name == "array":
            items = schema.get("items")
            item_type = self.type_of(items, dates_as_date) if items is not None else ANY_TYPE
            return f"{wrap_union(item_type)}[]"

        if type_name == "string":
            return self._string_type(schema.get("format"), dates_as_date)

        if type_name == "object":
            return self._object_type(schema, dates_as_date)

        if type_name in TYPE_MAPPING:
            return TYPE_MAPPING[type_name]

        logger.debug(f"Unsupported schema type {type_name!r}, falling back to {ANY_TYPE}")
        return ANY_TYPE

    @staticmethod
    def _string_type(format_name: Optional[str], dates_as_date: bool) -> str:
        if format_name == "binary":
            return "Blob"
        if format_name == "date-time" and dates_as_date:
            return "Date"
        # date, uuid и прочие форматы остаются строками
        return "string"

    def _object_type(self, schema: Dict[str, Any], dates_as_date: bool) -> str:
        properties = schema.get("properties") or {}
        if properties:
            required = set(schema.get("required") or [])
            fields = [
                TsProperty(
                    name=ts_property_name(name),
                    type=self.type_of(properties[name], dates_as_date),
                    optional=name not in required,
                )
                for name in sorted(properties)
                if name != EMBEDDED_PROPERTY
            ]
            if EMBEDDED_PROPERTY in properties:
                fields.extend(
                    self.embedded_properties(
                        "inline object", properties[EMBEDDED_PROPERTY], dates_as_date
                    )
                )
            if not fields:
                return "{}"
            return "{ " + "; ".join(f.inline() for f in fields) + " }"

        additional = schema.get("additionalProperties")
        if isinstance(additional, dict) and additional:
            return f"Record<string, {self.type_of(additional, dates_as_date)}>"

        return ANY_TYPE

    def interface(self, name: str, schema: Dict[str, Any]) -> TsInterface:
        """
        Интерфейс для именованной объектной схемы.

        Свойства сортируются по имени. ``| null`` добавляется необязательным
        свойствам, если nullable объявлена сама схема-владелец. Свойства
        ``_embedded`` поднимаются на верхний уровень со своей nullable.
        """
        properties = schema.get("properties") or {}
        required = set(schema.get("required") or [])
        owner_nullable = bool(schema.get("nullable"))

        result = []
        for prop_name in sorted(properties):
            if prop_name == EMBEDDED_PROPERTY:
                continue
            optional = prop_name not in required
            result.append(
                TsProperty(
                    name=ts_property_name(prop_name),
                    type=self.type_of(properties[prop_name]),
                    optional=optional,
                    nullable=optional and owner_nullable,
                )
            )

        if EMBEDDED_PROPERTY in properties:
            result.extend(self.embedded_properties(name, properties[EMBEDDED_PROPERTY]))

        additional = schema.get("additionalProperties")
        if not properties and isinstance(additional, dict) and additional:
            result.append(
                TsProperty(name="[key: string]", type=self.type_of(additional), optional=False)
            )

        return TsInterface(name=name, properties=result)

    def embedded_properties(
        self, owner: str, embedded: Any, dates_as_date: bool = False
    ) -> List[TsProperty]:
        embedded_schema = self.graph.deref(embedded)
        if not isinstance(embedded_schema, dict):
            logger.debug(f"{owner}: {EMBEDDED_PROPERTY} is not an object schema")
            return []

        properties = embedded_schema.get("properties") or {}
        required = set(embedded_schema.get("required") or [])

        result = []
        for prop_name in sorted(properties):
            prop = properties[prop_name]
            target = self.graph.deref(prop)
            optional = prop_name not in required
            nullable = isinstance(target, dict) and bool(target.get("nullable"))
            result.append(
                TsProperty(
                    name=ts_property_name(prop_name),
                    type=self.type_of(prop, dates_as_date),
                    optional=optional,
                    nullable=optional and nullable,
                )
            )
        return result
