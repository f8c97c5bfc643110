"""
Конфигурация генератора SDK
"""

import os
from dataclasses import asdict, dataclass
from typing import Optional

import toml

CONFIG_FILE = "sdkgen.toml"


@dataclass
class SdkConfig:
    """Конфигурация генератора TypeScript SDK"""

    doc: Optional[str] = None
    output: Optional[str] = None
    class_name: str = "GoCartSDK"
    # None - первый сервер из документа
    base_url: Optional[str] = None
    sdk_version: str = "unset"
    allow_external_refs: bool = True

    @classmethod
    def from_file(
        cls, config_path: str = CONFIG_FILE, search_dir: str = None
    ) -> Optional["SdkConfig"]:
        """Загрузка конфигурации из файла"""
        # Если указана директория для поиска, ищем конфиг там
        if search_dir and os.path.isdir(search_dir):
            config_in_dir = os.path.join(search_dir, CONFIG_FILE)
            if os.path.exists(config_in_dir):
                config_path = config_in_dir

        if not os.path.exists(config_path):
            return None

        try:
            config_data = toml.load(config_path)
        except (OSError, toml.TomlDecodeError):
            return None

        defaults = cls()
        return cls(
            doc=config_data.get("doc"),
            output=config_data.get("output"),
            class_name=config_data.get("class_name", defaults.class_name),
            base_url=config_data.get("base_url"),
            sdk_version=str(config_data.get("sdk_version", defaults.sdk_version)),
            allow_external_refs=bool(
                config_data.get("allow_external_refs", defaults.allow_external_refs)
            ),
        )

    def save_to_file(self, config_path: str = CONFIG_FILE) -> None:
        """Сохранение конфигурации в файл"""
        # В TOML нет null, незаданные значения просто не пишем
        config_data = {key: value for key, value in asdict(self).items() if value is not None}

        with open(config_path, "w") as f:
            toml.dump(config_data, f)

    def merge_with_args(self, args) -> "SdkConfig":
        """Объединение с аргументами командной строки"""
        return SdkConfig(
            doc=getattr(args, "doc", None) or self.doc,
            output=getattr(args, "output", None) or self.output,
            class_name=getattr(args, "class_name", None) or self.class_name,
            base_url=(
                args.base_url if getattr(args, "base_url", None) is not None else self.base_url
            ),
            sdk_version=getattr(args, "sdk_version", None) or self.sdk_version,
            allow_external_refs=(
                False if getattr(args, "no_external_refs", False) else self.allow_external_refs
            ),
        )
