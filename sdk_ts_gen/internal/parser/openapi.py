import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx
import yaml

from ...exceptions import DocumentLoadError
from .schema_graph import SchemaGraph

logger = logging.getLogger(__name__)

STDIN_SENTINEL = "-"


def parse_document(data: Union[bytes, str], source: Optional[str] = None) -> Dict[str, Any]:
    """Разбор JSON или YAML текста в словарь"""
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DocumentLoadError(f"document is not valid UTF-8: {exc}", source)

    if not data.strip():
        raise DocumentLoadError("document is empty", source)

    # JSON - подмножество YAML, но json.loads быстрее и точнее в сообщениях
    if data.lstrip().startswith(("{", "[")):
        try:
            return json.loads(data)
        except json.JSONDecodeError as exc:
            raise DocumentLoadError(f"invalid JSON: {exc}", source)

    try:
        return yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise DocumentLoadError(f"invalid YAML: {exc}", source)


def fetch_uri(uri: str, **kwargs) -> Any:
    """Загрузчик для jsonref: внешние документы по http(s) или file URI"""
    parsed = urlparse(uri)
    if parsed.scheme in ("http", "https"):
        response = httpx.get(uri, follow_redirects=True)
        response.raise_for_status()
        return parse_document(response.content, uri)

    path = url2pathname(parsed.path) if parsed.scheme == "file" else uri
    with open(path, "rb") as f:
        return parse_document(f.read(), uri)


def read_source(doc: str = STDIN_SENTINEL) -> Tuple[bytes, str]:
    """
    Чтение сырого документа.

    Args:
        doc: "-" для stdin, http(s) URL или путь к файлу

    Returns:
        Кортеж (байты документа, base URI для относительных $ref)
    """
    if not doc or doc == STDIN_SENTINEL:
        try:
            return sys.stdin.buffer.read(), Path(os.getcwd()).as_uri() + "/"
        except OSError as exc:
            raise DocumentLoadError(f"failed to read from stdin: {exc}", "stdin")

    if doc.startswith(("http://", "https://")):
        try:
            response = httpx.get(doc, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise DocumentLoadError(f"failed to fetch document: {exc}", doc)
        return response.content, doc

    try:
        with open(doc, "rb") as f:
            data = f.read()
    except OSError as exc:
        raise DocumentLoadError(f"failed to read file: {exc}", doc)
    return data, Path(doc).resolve().as_uri()


def load_document(
    data: Union[bytes, str, Dict[str, Any]],
    base_uri: str = "",
    allow_external_refs: bool = True,
    source: Optional[str] = None,
) -> SchemaGraph:
    """Загрузка OpenAPI 3.x документа в SchemaGraph"""
    document = data if isinstance(data, dict) else parse_document(data, source)

    if not isinstance(document, dict):
        raise DocumentLoadError("document root must be a mapping", source)

    version = str(document.get("openapi", ""))
    if not version.startswith("3."):
        if "swagger" in document:
            raise DocumentLoadError("OpenAPI 2.x (swagger) documents are not supported", source)
        raise DocumentLoadError(f"unsupported OpenAPI version: {version or 'missing'}", source)

    if not isinstance(document.get("paths") or {}, dict):
        raise DocumentLoadError("'paths' must be a mapping", source)

    logger.debug(
        f"Loaded OpenAPI {version} document with {len(document.get('paths') or {})} paths"
    )
    return SchemaGraph(
        document,
        base_uri=base_uri,
        allow_external_refs=allow_external_refs,
        loader=fetch_uri,
    )
