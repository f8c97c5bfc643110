import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from ..parser.schema_graph import SchemaGraph
from ..types.definitions import TypeDefinition
from ..types.models import CodeFile, TsInterface, TsTypeAlias
from ..types.schema_resolver import TypeResolver, is_object_schema
from ..utils.naming import to_pascal_case
from .templates import Templates

logger = logging.getLogger(__name__)

MULTIPART_CONTENT_TYPE = "multipart/form-data"
JSON_CONTENT_TYPE = "application/json"
# multipart важнее JSON, если объявлены оба
REQUEST_CONTENT_TYPES = (MULTIPART_CONTENT_TYPE, JSON_CONTENT_TYPE)
BODY_METHODS = ("POST", "PATCH", "PUT")
LOCAL_SCHEMA_PREFIX = "#/components/schemas/"


def request_type_name(operation_id: str) -> str:
    return to_pascal_case(operation_id) + "Request"


def request_body_schema(graph: SchemaGraph, operation: Dict[str, Any]) -> Tuple[Any, Optional[str]]:
    """Схема тела запроса и её content-type, (None, None) если тела нет"""
    for content_type in REQUEST_CONTENT_TYPES:
        schema = graph.request_content(operation, content_type)
        if schema is not None:
            return schema, content_type
    return None, None


class TypeGenerator:
    """Генерация types.ts: именованные схемы и inline тела запросов"""

    def __init__(self, graph: SchemaGraph, resolver: Optional[TypeResolver] = None):
        self.graph = graph
        self.resolver = resolver or TypeResolver(graph)

    def get_type_definitions(self) -> List[TypeDefinition]:
        definitions = [
            self._definition(to_pascal_case(name), self.graph.schemas[name])
            for name in self.graph.schema_names()
        ]
        definitions.extend(
            sorted(self._request_definitions(), key=lambda definition: definition.name)
        )
        return definitions

    def _request_definitions(self) -> List[TypeDefinition]:
        result = []
        for path in self.graph.paths():
            for method, operation in self.graph.operations(path):
                operation_id = operation.get("operationId")
                if method not in BODY_METHODS or not operation_id:
                    continue

                schema, content_type = request_body_schema(self.graph, operation)
                # Ссылки на именованные схемы уже есть среди components
                if schema is None or self.graph.ref_name(schema):
                    continue

                logger.debug(f"Inline {content_type} request body for {operation_id}")
                result.append(self._definition(request_type_name(operation_id), schema))
        return result

    def _definition(self, name: str, schema: Any) -> TypeDefinition:
        # Внешняя ссылка из components раскрывается под своим именем,
        # локальная остаётся алиасом
        ref = schema.get("$ref") if isinstance(schema, dict) else None
        if isinstance(ref, str) and not ref.startswith(LOCAL_SCHEMA_PREFIX):
            schema = self.graph.deref(schema)

        is_interface = (
            isinstance(schema, dict) and "$ref" not in schema and is_object_schema(schema)
        )
        return TypeDefinition(name=name, schema=schema, is_interface=is_interface)

    def render_definition(self, definition: TypeDefinition) -> Union[TsInterface, TsTypeAlias]:
        schema = definition.schema

        if definition.is_interface:
            return self.resolver.interface(definition.name, schema)

        if isinstance(schema, dict) and schema.get("enum") and "$ref" not in schema:
            return TsTypeAlias(
                name=definition.name, value=self.resolver.named_enum(schema["enum"])
            )

        return TsTypeAlias(name=definition.name, value=self.resolver.resolve(schema).name)

    def generate(self, definitions: List[TypeDefinition]) -> CodeFile:
        code_file = CodeFile(file_name="types.ts", header=[Templates.types_header])
        for definition in definitions:
            code_file.add_block(self.render_definition(definition))
        return code_file
