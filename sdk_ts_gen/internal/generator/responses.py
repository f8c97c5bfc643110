import logging
from typing import Any, Dict, List, Optional

from ...exceptions import UnresolvedReferenceError
from ..parser.schema_graph import SchemaGraph
from ..types.definitions import ResponseSpec
from ..types.schema_resolver import TypeResolver, declared_types

logger = logging.getLogger(__name__)

# Порядок важен: побеждает первый статус с телом
STATUS_PRIORITY = ("200", "201", "202", "204")
NO_CONTENT_STATUS = "204"

HTML_CONTENT_TYPE = "text/html"

BINARY_CONTENT_TYPES = frozenset(
    {
        "application/pdf",
        "application/octet-stream",
        "application/zip",
        "application/gzip",
        "application/x-tar",
        "application/msword",
        "application/vnd.ms-excel",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "text/csv",
    }
)
BINARY_PREFIXES = ("image/", "video/", "audio/", "font/")

HANDLERS = {
    "none": ["return;"],
    "html": [
        "// Handle HTML response",
        "const html = await response.text();",
        "return html;",
    ],
    "text": [
        "const text = await response.text();",
        "return text;",
    ],
    "binary": [
        "// Handle binary response",
        "const blob = await response.blob();",
        "return blob;",
    ],
    "json": [
        "const data = await response.json();",
        "// Transform keys to camelCase and recursively convert nested objects",
        "return toClientType(data);",
    ],
}


def media_type(content_type: str) -> str:
    """``Application/JSON; charset=utf-8`` -> ``application/json``"""
    return content_type.split(";", 1)[0].strip().lower()


def is_binary_content_type(content_type: str) -> bool:
    """
    Examples:
        >>> is_binary_content_type("image/jpeg")
        True
        >>> is_binary_content_type("text/plain")
        False
    """
    value = media_type(content_type)
    return value in BINARY_CONTENT_TYPES or value.startswith(BINARY_PREFIXES)


def is_json_content_type(content_type: str) -> bool:
    value = media_type(content_type)
    return value == "application/json" or value.endswith("+json")


def is_binary_schema(graph: SchemaGraph, schema: Any) -> bool:
    try:
        schema = graph.deref(schema)
    except UnresolvedReferenceError as exc:
        # Тип ответа по ссылке берется из имени, схема не нужна
        logger.debug(f"Skipping binary check for {exc.ref}: {exc.message}")
        return False
    return (
        isinstance(schema, dict)
        and "string" in declared_types(schema)
        and schema.get("format") == "binary"
    )


def determine_response(
    graph: SchemaGraph, resolver: TypeResolver, operation: Dict[str, Any]
) -> ResponseSpec:
    """Выбор ответа операции по приоритету статусов и content-type"""
    responses = graph.responses(operation)
    for status in STATUS_PRIORITY:
        response = responses.get(status)
        if not response or status == NO_CONTENT_STATUS:
            continue

        spec = pick_content(graph, resolver, response.get("content") or {})
        if spec is not None:
            logger.debug(
                f"{operation.get('operationId')}: {status} {spec.content_type} -> {spec.type_name}"
            )
            return spec
    return ResponseSpec()


def pick_content(
    graph: SchemaGraph, resolver: TypeResolver, content: Dict[str, Any]
) -> Optional[ResponseSpec]:
    """
    Обработчик ответа: HTML, затем бинарные типы, затем JSON, затем прочий text/*.
    """
    content_types = sorted(content)

    def schema_of(content_type: str) -> Any:
        return (content.get(content_type) or {}).get("schema")

    for content_type in content_types:
        if media_type(content_type) == HTML_CONTENT_TYPE:
            return ResponseSpec("string", content_type, schema_of(content_type), "html")

    for content_type in content_types:
        schema = schema_of(content_type)
        if is_binary_content_type(content_type) or is_binary_schema(graph, schema):
            return ResponseSpec("Blob", content_type, schema, "binary")

    for content_type in content_types:
        if is_json_content_type(content_type):
            schema = schema_of(content_type)
            type_name = resolver.type_of(schema, dates_as_date=True)
            return ResponseSpec(type_name, content_type, schema, "json")

    for content_type in content_types:
        if media_type(content_type).startswith("text/"):
            return ResponseSpec("string", content_type, schema_of(content_type), "text")

    return None


def response_handling(response: ResponseSpec) -> List[str]:
    return list(HANDLERS[response.handler])
