import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from ..utils.field_utils import parse_bracket_param
from ..utils.ordering import sorted_unique

IDENTIFIER_PATTERN = re.compile(r"\b[A-Z][A-Za-z0-9_]*\b")


@dataclass(frozen=True)
class TypeDefinition:
    """Именованный тип для types.ts"""

    name: str
    schema: Any
    is_interface: bool = False


@dataclass(frozen=True)
class QueryParameter:
    """Query параметр операции"""

    name: str
    schema: Any = None
    required: bool = False
    description: str = ""
    # Значение расширения x-gocart-sdk-type
    sdk_type: Optional[str] = None

    @property
    def group(self) -> str:
        base, _ = parse_bracket_param(self.name)
        return base or self.name

    @property
    def key(self) -> str:
        """Локальное имя внутри группы (для filter[created_at] это created_at)"""
        _, key = parse_bracket_param(self.name)
        return key or self.name

    @property
    def is_bracketed(self) -> bool:
        return bool(parse_bracket_param(self.name)[0])


@dataclass(frozen=True)
class ParamDefinition:
    """Интерфейс параметров GET операции для params.ts"""

    name: str
    operation_id: str
    path: str
    groups: Dict[str, List[QueryParameter]] = field(default_factory=dict)

    @property
    def is_list(self) -> bool:
        return self.operation_id.startswith("list")


@dataclass(frozen=True)
class MethodArgument:
    name: str
    type: str
    default: Optional[str] = None


@dataclass(frozen=True)
class ResponseSpec:
    """
    Выбранный ответ операции.

    handler - способ чтения тела в сгенерированном коде:
    json, html, text, binary или none (тела нет).
    """

    type_name: str = "void"
    content_type: Optional[str] = None
    schema: Any = None
    handler: str = "none"


@dataclass(frozen=True)
class MethodDefinition:
    name: str
    http_method: str
    path: str
    operation: Dict[str, Any]

    arguments: Tuple[MethodArgument, ...] = ()
    response: ResponseSpec = ResponseSpec()
    query_groups: Dict[str, List[QueryParameter]] = field(default_factory=dict)

    request_type: Optional[str] = None
    request_content_type: Optional[str] = None
    request_schema: Any = None

    @property
    def response_type(self) -> str:
        return self.response.type_name

    @property
    def is_list(self) -> bool:
        return self.http_method == "GET" and self.name.startswith("list")


@dataclass
class ImportAccumulator:
    """Имена, которые sdk.ts импортирует из types.ts и params.ts"""

    known_types: Set[str] = field(default_factory=set)
    known_params: Set[str] = field(default_factory=set)

    types: Set[str] = field(default_factory=set)
    params: Set[str] = field(default_factory=set)

    def add(self, type_expression: Optional[str]) -> None:
        """Регистрация всех известных имён из выражения типа (``Item[] | null``)"""
        if not type_expression:
            return
        for name in IDENTIFIER_PATTERN.findall(type_expression):
            if name in self.known_types:
                self.types.add(name)
            elif name in self.known_params:
                self.params.add(name)

    def extend(self, type_expressions: Iterable[Optional[str]]) -> None:
        for expression in type_expressions:
            self.add(expression)

    def finalize(self) -> Tuple[List[str], List[str]]:
        return sorted_unique(self.types), sorted_unique(self.params)
