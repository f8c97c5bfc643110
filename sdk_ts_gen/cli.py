import argparse
import logging
import os
import sys
from typing import List, Optional

from sdk_ts_gen import __version__
from sdk_ts_gen.config import CONFIG_FILE, SdkConfig
from sdk_ts_gen.exceptions import GenerationError
from sdk_ts_gen.generator import SdkGenerator
from sdk_ts_gen.internal.parser import load_document, read_source
from sdk_ts_gen.internal.types.models import Project

DEFAULT_DOC = "-"
DEFAULT_OUTPUT = "./src"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sdk-ts-gen", description="Генерация TypeScript SDK из OpenAPI 3.x"
    )
    parser.add_argument(
        "--doc",
        type=str,
        help="Путь или URL к OpenAPI документу, '-' для stdin (по умолчанию stdin)",
    )
    parser.add_argument(
        "-o", "--output", type=str, help=f"Директория для файлов SDK (по умолчанию {DEFAULT_OUTPUT})"
    )
    parser.add_argument("--version", action="store_true", help="Показать версию и выйти")
    parser.add_argument("--config", type=str, help=f"Путь к конфигу (по умолчанию {CONFIG_FILE})")
    parser.add_argument("--class-name", type=str, help="Имя класса SDK")
    parser.add_argument("--base-url", type=str, help="Базовый URL по умолчанию в конструкторе")
    parser.add_argument("--sdk-version", type=str, help="Значение заголовка x-gocart-sdk-version")
    parser.add_argument(
        "--no-external-refs", action="store_true", help="Запретить внешние $ref"
    )
    parser.add_argument(
        "--init-config", action="store_true", help=f"Создать конфиг файл {CONFIG_FILE}"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Отладочный вывод")
    return parser


def _resolve_config(args) -> SdkConfig:
    """Конфиг из файла, поверх него аргументы командной строки"""
    file_config = SdkConfig.from_file(args.config or CONFIG_FILE)
    if file_config:
        print(f"📋 Используется конфиг из {args.config or CONFIG_FILE}")

    config = (file_config or SdkConfig()).merge_with_args(args)
    config.doc = config.doc or DEFAULT_DOC
    config.output = config.output or DEFAULT_OUTPUT
    return config


def _generate_project(config: SdkConfig) -> Project:
    """Ядро генерации - только генерация без сохранения"""
    source = "stdin" if config.doc == DEFAULT_DOC else config.doc
    print(f"📥 Загрузка OpenAPI документа из {source}...", file=sys.stderr)

    data, base_uri = read_source(config.doc)
    graph = load_document(
        data,
        base_uri=base_uri,
        allow_external_refs=config.allow_external_refs,
        source=source,
    )

    print("⚙️ Генерация кода...", file=sys.stderr)
    return SdkGenerator(graph, config).generate()


def _save_project_files(project: Project, target_path: str):
    """Сохранение файлов проекта"""
    print(f"💾 Сохранение {len(project.files)} файлов...", file=sys.stderr)

    os.makedirs(target_path, exist_ok=True)
    for code_file in project.files:
        path = os.path.join(target_path, code_file.file_name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(str(code_file))

    print("✅ Генерация завершена успешно!", file=sys.stderr)
    print(f"📦 SDK создан в: {os.path.abspath(target_path)}", file=sys.stderr)


def main(argv: Optional[List[str]] = None):
    """Команда генерации TypeScript SDK"""
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"sdk-ts-gen version {__version__}")
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.init_config:
        config = SdkConfig().merge_with_args(args)
        config.save_to_file(args.config or CONFIG_FILE)
        print(f"✅ Создан конфиг файл {args.config or CONFIG_FILE}")
        return

    config = _resolve_config(args)

    try:
        project = _generate_project(config)
    except GenerationError as e:
        print(f"❌ Ошибка генерации: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        _save_project_files(project, config.output)
    except OSError as e:
        print(f"❌ Ошибка записи файлов: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
