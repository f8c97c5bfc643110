"""
Главный модуль генератора - чистый интерфейс
"""

from typing import Any, Dict, Optional, Union

from .config import SdkConfig
from .internal.generator.client_generator import ClientGenerator
from .internal.generator.param_generator import ParamGenerator
from .internal.generator.type_generator import TypeGenerator
from .internal.parser import SchemaGraph, load_document
from .internal.types.models import Project
from .internal.types.schema_resolver import TypeResolver


class SdkGenerator:
    """Генерация sdk.ts, types.ts и params.ts из загруженного документа"""

    def __init__(self, graph: SchemaGraph, config: Optional[SdkConfig] = None):
        self.graph = graph
        self.config = config or SdkConfig()

        resolver = TypeResolver(graph)
        self.types = TypeGenerator(graph, resolver)
        self.params = ParamGenerator(graph, resolver)
        self.client = ClientGenerator(
            graph,
            resolver,
            class_name=self.config.class_name,
            base_url=self.config.base_url,
            sdk_version=self.config.sdk_version,
        )

    def generate(self) -> Project:
        """Генерация всех файлов в памяти, без записи на диск"""
        type_definitions = self.types.get_type_definitions()
        param_definitions = self.params.get_param_definitions()

        project = Project(name=self.config.class_name)
        project.add_file(self.client.generate(type_definitions, param_definitions))
        project.add_file(self.types.generate(type_definitions))
        project.add_file(self.params.generate(param_definitions))
        return project


def generate_sdk(
    document: Union[bytes, str, Dict[str, Any]], config: Optional[SdkConfig] = None
) -> Project:
    """Создание SDK из документа (байты, текст или уже разобранный словарь)"""
    config = config or SdkConfig()
    graph = load_document(document, allow_external_refs=config.allow_external_refs)
    return SdkGenerator(graph, config).generate()
