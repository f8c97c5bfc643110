import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from ...exceptions import MissingOperationIdError
from ..parser.schema_graph import SchemaGraph
from ..types.definitions import (
    ImportAccumulator,
    MethodArgument,
    MethodDefinition,
    ParamDefinition,
    TypeDefinition,
)
from ..types.models import CodeBlock, CodeFile, TsArgument, TsClass, TsMethod
from ..types.schema_resolver import (
    ANY_TYPE,
    EMBEDDED_PROPERTY,
    TypeResolver,
    declared_types,
    is_object_schema,
)
from ..utils.field_utils import extract_path_params
from ..utils.naming import to_camel_case, to_pascal_case, ts_string
from ..utils.ordering import remove_duplicates
from .param_generator import (
    RANGE_TYPES,
    extract_query_parameters,
    group_parameters,
    interface_name,
)
from .query_builder import QueryStringBuilder, block, defined, property_access
from .responses import determine_response, is_binary_schema, response_handling
from .templates import Templates
from .type_generator import (
    BODY_METHODS,
    MULTIPART_CONTENT_TYPE,
    request_body_schema,
    request_type_name,
)

logger = logging.getLogger(__name__)

DEFAULT_CLASS_NAME = "GoCartSDK"
ERROR_TYPE = "APIError"
PAYLOAD_ARGUMENT = "req"
PARAMS_ARGUMENT = "params"


def argument_name(placeholder: str) -> str:
    """Имя аргумента для плейсхолдера пути: {item_id} -> itemId"""
    return to_camel_case(re.sub(r"[^A-Za-z0-9_]", "_", placeholder))


class ClientGenerator:
    """Генератор sdk.ts: один класс, один async метод на операцию"""

    def __init__(
        self,
        graph: SchemaGraph,
        resolver: Optional[TypeResolver] = None,
        class_name: str = DEFAULT_CLASS_NAME,
        base_url: Optional[str] = None,
        sdk_version: str = "unset",
    ):
        self.graph = graph
        self.resolver = resolver or TypeResolver(graph)
        self.class_name = class_name
        self.sdk_version = sdk_version

        if base_url is None:
            servers = graph.servers()
            base_url = servers[0] if servers else ""
        self.base_url = base_url

    def get_method_definitions(self) -> List[MethodDefinition]:
        definitions = []
        for path in self.graph.paths():
            for method, operation in self.graph.operations(path):
                definitions.append(self.method_definition(path, method, operation))
        return sorted(definitions, key=lambda definition: definition.name)

    def method_definition(self, path: str, method: str, operation: Dict[str, Any]) -> MethodDefinition:
        name = operation.get("operationId")
        if not name:
            raise MissingOperationIdError(method, path)

        arguments = self._path_arguments(path, operation)

        request_type = request_content_type = request_schema = None
        if method in BODY_METHODS:
            request_schema, request_content_type = request_body_schema(self.graph, operation)
            if request_schema is not None:
                ref = self.graph.ref_name(request_schema)
                request_type = to_pascal_case(ref) if ref else request_type_name(name)
                arguments.append(MethodArgument(PAYLOAD_ARGUMENT, request_type))

        query_groups = {}
        if method == "GET":
            arguments.append(
                MethodArgument(PARAMS_ARGUMENT, interface_name(method, path, name), default="{}")
            )
            query_groups = group_parameters(extract_query_parameters(self.graph, path, operation))

        return MethodDefinition(
            name=name,
            http_method=method,
            path=path,
            operation=operation,
            arguments=tuple(arguments),
            response=determine_response(self.graph, self.resolver, operation),
            query_groups=query_groups,
            request_type=request_type,
            request_content_type=request_content_type,
            request_schema=request_schema,
        )

    def _path_arguments(self, path: str, operation: Dict[str, Any]) -> List[MethodArgument]:
        declared = {
            param["name"]: param
            for param in self.graph.parameters(path, operation)
            if param.get("in") == "path"
        }

        arguments = []
        for placeholder in remove_duplicates(extract_path_params(path)):
            arg_type = "string"
            if placeholder in declared:
                resolved = self.resolver.type_of(declared[placeholder].get("schema"))
                if resolved != ANY_TYPE:
                    arg_type = resolved
            arguments.append(MethodArgument(argument_name(placeholder), arg_type))
        return arguments

    def embedded_object_keys(self, method: MethodDefinition) -> List[str]:
        """
        camelCase ключи объектов из ``_embedded``, которые toApiType
        должен вернуть во вложенную форму сервера.
        """
        request = self.graph.deref(method.request_schema)
        if not isinstance(request, dict):
            return []

        if is_object_schema(request):
            source = method.response.schema
            if source is None:
                source = request
            return self._embedded_keys(source)

        if "array" in declared_types(request):
            items = request.get("items")
            if self.graph.ref_name(items) and is_object_schema(self.graph.deref(items)):
                return self._embedded_keys(items)
        return []

    def _embedded_keys(self, schema: Any) -> List[str]:
        schema = self.graph.deref(schema)
        if not isinstance(schema, dict):
            return []

        embedded = self.graph.deref((schema.get("properties") or {}).get(EMBEDDED_PROPERTY))
        if not isinstance(embedded, dict):
            return []

        keys = []
        properties = embedded.get("properties") or {}
        for name in sorted(properties):
            target = self.graph.deref(properties[name])
            if not isinstance(target, dict):
                continue
            if is_object_schema(target) and "items" not in target:
                keys.append(to_camel_case(name))
            elif "array" in declared_types(target) and self.graph.ref_name(target.get("items")):
                keys.append(to_camel_case(name))
        return keys

    def build_method(self, method: MethodDefinition) -> Tuple[TsMethod, QueryStringBuilder]:
        lines = [f"const url = `${{this.baseUrl}}{self._url_template(method.path)}`;"]
        lines.extend(self._request_lines(method))

        if method.is_list:
            lines.extend(Templates.total_count.split("\n"))

        builder = QueryStringBuilder(method.query_groups, PARAMS_ARGUMENT)
        lines.extend(builder.build())
        lines.append("")
        lines.extend(Templates.dispatch.split("\n"))
        lines.append("")
        lines.extend(response_handling(method.response))

        ts_method = TsMethod(
            name=method.name,
            arguments=[
                TsArgument(name=a.name, type=a.type, default=a.default)
                for a in method.arguments
            ],
            response=method.response_type,
            async_def=True,
            doc=self._method_doc(method),
            code=CodeBlock(code="\n".join(lines)),
            order=1,
        )
        return ts_method, builder

    def synthesize(self, method: MethodDefinition) -> str:
        """Исходный текст метода SDK"""
        return str(self.build_method(method)[0])

    @staticmethod
    def _url_template(path: str) -> str:
        return re.sub(
            r"\{([^}]+)\}",
            lambda match: "${" + argument_name(match.group(1)) + "}",
            path,
        )

    def _method_doc(self, method: MethodDefinition) -> List[str]:
        doc = [method.name]
        summary = (method.operation.get("summary") or "").strip()
        if summary:
            doc.append(summary)
        doc.append("")
        doc.extend(f"@param {argument.name}" for argument in method.arguments)
        doc.append(f"@returns Promise<{method.response_type}>")
        if method.operation.get("deprecated"):
            doc.append("@deprecated")
        return doc

    def _request_lines(self, method: MethodDefinition) -> List[str]:
        verb = method.http_method

        if method.request_type and method.request_content_type == MULTIPART_CONTENT_TYPE:
            lines = self._multipart_lines(method)
            lines.extend(
                self._options(
                    verb,
                    [
                        "// Content-Type with the multipart boundary is set by fetch",
                        "'Accept': 'application/json',",
                    ],
                    "formData",
                )
            )
            return lines

        json_headers = ["'Content-Type': 'application/json',"]
        if method.request_type:
            keys = ", ".join(ts_string(key) for key in self.embedded_object_keys(method))
            lines = [
                f"const embeddedObjects: string[] = [{keys}];",
                f"const body = toApiType({PAYLOAD_ARGUMENT}, embeddedObjects);",
            ]
            lines.extend(self._options(verb, json_headers, "JSON.stringify(body)"))
            return lines

        return self._options(verb, json_headers)

    @staticmethod
    def _options(verb: str, headers: List[str], body: Optional[str] = None) -> List[str]:
        lines = [
            "let options: RequestInit = {",
            f"  method: '{verb}',",
            "  headers: {",
        ]
        lines.extend("    " + header for header in headers)
        lines.append("    'x-gocart-sdk-version': SDK_VERSION,")
        lines.append("  },")
        if body:
            lines.append(f"  body: {body},")
        lines.append("};")
        return lines

    def _multipart_lines(self, method: MethodDefinition) -> List[str]:
        """Каждое свойство схемы добавляется в FormData отдельно"""
        lines = [
            "// This is a multipart/form-data request",
            "const formData = new FormData();",
        ]

        schema = self.graph.deref(method.request_schema)
        properties = (schema.get("properties") or {}) if isinstance(schema, dict) else {}
        for name in sorted(properties):
            target = self.graph.deref(properties[name])
            access = property_access(PAYLOAD_ARGUMENT, name)
            wire = ts_string(name)

            if not isinstance(target, dict):
                target = {}
            composed = any(key in target for key in ("allOf", "oneOf", "anyOf"))

            if "array" in declared_types(target) and is_binary_schema(self.graph, target.get("items")):
                lines.extend(
                    block(
                        access,
                        [f"for (const item of {access}) {{", f"  formData.append({wire}, item);", "}"],
                    )
                )
            elif is_object_schema(target) or composed or "array" in declared_types(target):
                lines.extend(block(access, [f"formData.append({wire}, JSON.stringify({access}));"]))
            elif is_binary_schema(self.graph, target):
                lines.extend(block(defined(access), [f"formData.append({wire}, {access});"]))
            else:
                lines.extend(block(defined(access), [f"formData.append({wire}, String({access}));"]))
        return lines

    def _format_filter_value(self) -> TsMethod:
        return TsMethod(
            name="formatFilterValue",
            arguments=[TsArgument(name="value", type="unknown")],
            response="string",
            visibility="private",
            code=CodeBlock(code=Templates.format_filter_value),
            order=0,
        )

    def generate(
        self,
        type_definitions: List[TypeDefinition],
        param_definitions: List[ParamDefinition],
        methods: Optional[List[MethodDefinition]] = None,
    ) -> CodeFile:
        if methods is None:
            methods = self.get_method_definitions()

        imports = ImportAccumulator(
            known_types={definition.name for definition in type_definitions},
            known_params={definition.name for definition in param_definitions} | set(RANGE_TYPES),
        )

        sdk_class = TsClass(name=self.class_name, members=[Templates.class_members])
        sdk_class.add_method(
            "constructor",
            visibility="",
            response=None,
            arguments=[TsArgument(name="baseUrl", type="string", default=ts_string(self.base_url))],
            code=CodeBlock(code=Templates.constructor),
            order=2,
        )

        uses_format_helper = False
        for method in methods:
            ts_method, builder = self.build_method(method)
            sdk_class.add_method(ts_method)

            imports.extend(argument.type for argument in method.arguments)
            imports.add(method.response_type)
            imports.extend(sorted(builder.range_types))
            uses_format_helper = uses_format_helper or builder.uses_format_helper

        if uses_format_helper:
            sdk_class.add_method(self._format_filter_value())

        if ERROR_TYPE in imports.known_types:
            imports.types.add(ERROR_TYPE)
            error_names = "ApiError"
        else:
            error_names = f"ApiError, {ERROR_TYPE}"

        types, params = imports.finalize()
        code_file = CodeFile(file_name="sdk.ts", header=[Templates.sdk_header])
        for names, module in ((types, "./types"), (params, "./params")):
            if names:
                code_file.imports.append(
                    Templates.named_imports.format(
                        names="\n".join(f"  {name}," for name in names), module=module
                    )
                )
        code_file.imports.append(Templates.support_imports.format(error_names=error_names))

        code_file.add_block(
            CodeBlock(code=Templates.sdk_version.format(version=ts_string(self.sdk_version)), order=1)
        )
        code_file.add_block(sdk_class)

        logger.debug(f"Generated {len(methods)} methods for {self.class_name}")
        return code_file
