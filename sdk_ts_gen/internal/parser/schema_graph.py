import logging
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import unquote

import jsonref

from ...exceptions import UnresolvedReferenceError
from ..utils.field_utils import ref_name

logger = logging.getLogger(__name__)

# Порядок важен: методы операции перебираются именно так
HTTP_METHODS = ("get", "post", "patch", "put", "delete")


class SchemaGraph:
    """
    Read-only представление OpenAPI документа.

    Узлы схем - исходные словари документа. Узлы с ``$ref`` остаются на месте
    и разрешаются по имени через ``deref``, поэтому циклы между именованными
    схемами не превращаются в циклы в памяти.
    """

    def __init__(
        self,
        document: Dict[str, Any],
        base_uri: str = "",
        allow_external_refs: bool = True,
        loader: Optional[Callable[..., Any]] = None,
    ):
        self.document = document
        self.base_uri = base_uri or ""
        self.allow_external_refs = allow_external_refs
        self._loader = loader
        self._external_cache: Dict[str, Any] = {}

    @property
    def schemas(self) -> Dict[str, Any]:
        return (self.document.get("components") or {}).get("schemas") or {}

    def schema_names(self) -> List[str]:
        return sorted(self.schemas.keys())

    def paths(self) -> List[str]:
        return sorted((self.document.get("paths") or {}).keys())

    def path_item(self, path: str) -> Dict[str, Any]:
        item = (self.document.get("paths") or {}).get(path) or {}
        return self.deref(item)

    def operations(self, path: str) -> List[Tuple[str, Dict[str, Any]]]:
        """Операции пути в фиксированном порядке GET, POST, PATCH, PUT, DELETE"""
        item = self.path_item(path)
        result = []
        for method in HTTP_METHODS:
            operation = item.get(method)
            if operation:
                result.append((method.upper(), operation))
        return result

    def servers(self) -> List[str]:
        return [s["url"] for s in self.document.get("servers") or [] if s.get("url")]

    @staticmethod
    def ref_name(node: Any) -> Optional[str]:
        """Имя именованной ссылки или None для inline узла"""
        if isinstance(node, dict) and isinstance(node.get("$ref"), str):
            return ref_name(node["$ref"])
        return None

    def deref(self, node: Any) -> Any:
        """Разрешение цепочки $ref до конечного узла"""
        seen = set()
        while isinstance(node, dict) and isinstance(node.get("$ref"), str):
            ref = node["$ref"]
            if ref in seen:
                raise UnresolvedReferenceError(ref, "reference loop")
            seen.add(ref)
            node = self._resolve_ref(ref)
        return node

    def lookup_schema(self, name: str) -> Dict[str, Any]:
        """Именованная схема из components.schemas с разрешением ссылок"""
        if name not in self.schemas:
            raise UnresolvedReferenceError(
                f"#/components/schemas/{name}",
                "reference not found in components.schemas",
            )
        return self.deref(self.schemas[name])

    def parameters(self, path: str, operation: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Параметры операции вместе с параметрами уровня пути"""
        merged: Dict[Tuple[str, str], Dict[str, Any]] = {}
        for raw in list(self.path_item(path).get("parameters") or []) + list(
            operation.get("parameters") or []
        ):
            param = self.deref(raw)
            if not isinstance(param, dict) or "name" not in param:
                continue
            merged[(param["name"], param.get("in", "query"))] = param
        return list(merged.values())

    def request_body(self, operation: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        body = operation.get("requestBody")
        if not body:
            return None
        return self.deref(body)

    def request_content(self, operation: Dict[str, Any], content_type: str) -> Any:
        """Схема тела запроса для content-type или None"""
        body = self.request_body(operation)
        if not body:
            return None
        media = (body.get("content") or {}).get(content_type)
        if not media:
            return None
        return media.get("schema")

    def responses(self, operation: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
        return {
            str(code): self.deref(response)
            for code, response in (operation.get("responses") or {}).items()
        }

    def _resolve_ref(self, ref: str) -> Any:
        if ref.startswith("#"):
            return self._resolve_pointer(self.document, ref[1:], ref)

        if not self.allow_external_refs:
            raise UnresolvedReferenceError(ref, "external references are disabled")

        if ref not in self._external_cache:
            logger.debug(f"Loading external reference {ref}")
            kwargs = {"base_uri": self.base_uri}
            if self._loader:
                kwargs["loader"] = self._loader
            try:
                proxy = jsonref.replace_refs({"$ref": ref}, **kwargs)
                self._external_cache[ref] = proxy.__subject__
            except jsonref.JsonRefError as exc:
                raise UnresolvedReferenceError(ref, str(exc)) from exc
        return self._external_cache[ref]

    @staticmethod
    def _resolve_pointer(document: Any, pointer: str, ref: str) -> Any:
        node = document
        for token in [t for t in pointer.split("/") if t]:
            token = unquote(token).replace("~1", "/").replace("~0", "~")
            if isinstance(node, list):
                try:
                    node = node[int(token)]
                    continue
                except (ValueError, IndexError):
                    raise UnresolvedReferenceError(ref)
            if not isinstance(node, dict) or token not in node:
                raise UnresolvedReferenceError(ref)
            node = node[token]
        return node
