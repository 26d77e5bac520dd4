"""
Модуль main.py
Главный модуль приложения, координирующий работу всех компонентов.
Обрабатывает аргументы командной строки и запускает загрузку и генерацию документа.
"""

import argparse
import asyncio
import sys
import time
from datetime import datetime
from typing import List, Optional, Sequence

import httpx

from .client import LinkdingClient
from .config import Config, ConfigManager, resolve_time_range, validate_config
from .errors import ConfigurationError, LinkdingMarkdownError
from .logger import (
    get_logger,
    log_error_with_context,
    log_function_call,
    log_performance,
    setup_logging,
)
from .models import Bookmark
from .scaffold import DEFAULT_ENV_FILE, DEFAULT_TEMPLATE_FILE, init_project
from .writer import MarkdownGenerator, write_output

# Настройка логера для модуля
logger = get_logger(__name__)


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Парсит аргументы командной строки.

    Аргументы:
        argv: Аргументы (по умолчанию sys.argv[1:])

    Возвращает:
        argparse.Namespace: Объект с аргументами командной строки
    """
    parser = argparse.ArgumentParser(
        prog="linkding-to-markdown",
        description="Выгрузка закладок Linkding в Markdown-документ",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры использования:
  linkding-to-markdown init
  linkding-to-markdown fetch --days 7
  linkding-to-markdown fetch --days 7 --output bookmarks.md
  linkding-to-markdown fetch --since 2025-01-01 --until 2025-01-31
  linkding-to-markdown fetch --query "golang" --days 30
        """,
    )

    parser.add_argument(
        "--config", dest="config_path", help="Путь к .env файлу (по умолчанию: .env)"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Подробное логирование (DEBUG уровень)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    fetch = subparsers.add_parser(
        "fetch", help="Загрузить закладки из Linkding и сгенерировать документ"
    )
    # Подключение
    fetch.add_argument("--url", help="Адрес экземпляра Linkding (переопределяет LINKDING_URL)")
    fetch.add_argument("--token", help="API-токен Linkding (переопределяет LINKDING_TOKEN)")
    fetch.add_argument("--timeout", type=float, help="Таймаут HTTP-запроса, секунды")
    # Временной диапазон и фильтр
    fetch.add_argument("--days", type=int, help="Сколько дней назад начинать выборку")
    fetch.add_argument("--since", help="Закладки, добавленные с даты (YYYY-MM-DD)")
    fetch.add_argument("--until", help="Верхняя граница диапазона (YYYY-MM-DD)")
    fetch.add_argument("--query", help="Поисковый запрос")
    # Вывод
    fetch.add_argument("--output", "-o", help="Файл результата (по умолчанию: stdout)")
    fetch.add_argument("--title", help="Заголовок документа")
    fetch.add_argument("--no-notes", action="store_true", help="Не выводить заметки")
    fetch.add_argument("--no-tags", action="store_true", help="Не выводить теги")
    fetch.add_argument(
        "--no-group-by-date", action="store_true", help="Не группировать закладки по дате"
    )
    fetch.add_argument(
        "--date-format", help="Формат даты для группировки (раскладка Go или strftime)"
    )
    fetch.add_argument("--template", help="Файл шаблона (по умолчанию: встроенный)")

    init = subparsers.add_parser("init", help="Создать файл настроек и файл шаблона")
    init.add_argument("--force", action="store_true", help="Перезаписать существующие файлы")
    init.add_argument(
        "--template-file",
        default=DEFAULT_TEMPLATE_FILE,
        help=f"Имя создаваемого файла шаблона (по умолчанию: {DEFAULT_TEMPLATE_FILE})",
    )
    init.add_argument(
        "--env-file",
        default=DEFAULT_ENV_FILE,
        help=f"Имя создаваемого файла настроек (по умолчанию: {DEFAULT_ENV_FILE})",
    )

    return parser.parse_args(argv)


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """
    Применяет переопределения из аргументов командной строки.

    Аргументы:
        config: Конфигурация из .env
        args: Аргументы команды fetch

    Возвращает:
        Config: Та же конфигурация с примененными значениями
    """
    overrides = {
        "linkding_url": args.url,
        "linkding_token": args.token,
        "linkding_timeout": args.timeout,
        "fetch_days": args.days,
        "fetch_since": args.since,
        "fetch_until": args.until,
        "fetch_query": args.query,
        "output_file": args.output,
        "document_title": args.title,
        "date_format": args.date_format,
        "template_file": args.template,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)
            if name != "linkding_token":
                logger.debug(f"Переопределен параметр {name}: {value}")

    if args.no_notes:
        config.include_notes = False
    if args.no_tags:
        config.include_tags = False
    if args.no_group_by_date:
        config.group_by_date = False

    return config


def setup_application_logging(args: argparse.Namespace, config: Config) -> None:
    """
    Настраивает логирование приложения.

    Аргументы:
        args: Аргументы командной строки
        config: Объект конфигурации
    """
    if args.verbose:
        config.log_level = "DEBUG"
    setup_logging(config)


async def fetch_bookmarks(
    config: Config,
    added_since: Optional[datetime] = None,
    modified_since: Optional[datetime] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[Bookmark]:
    """
    Загружает все закладки по настройкам.

    Аргументы:
        config: Конфигурация приложения
        added_since: Нижняя граница даты добавления
        modified_since: Нижняя граница даты изменения
        transport: Транспорт httpx (для тестов)

    Возвращает:
        List[Bookmark]: Закладки в порядке поступления
    """
    async with LinkdingClient.from_config(config, transport=transport) as client:
        return await client.fetch_all_bookmarks(
            config.fetch_query, added_since, modified_since
        )


def run_fetch(
    args: argparse.Namespace, transport: Optional[httpx.AsyncBaseTransport] = None
) -> int:
    """
    Выполняет команду fetch.

    Аргументы:
        args: Аргументы командной строки
        transport: Транспорт httpx (для тестов)

    Возвращает:
        int: Количество записанных байт
    """
    start_time = time.time()

    config = apply_overrides(ConfigManager(args.config_path, validate=False).get(), args)
    setup_application_logging(args, config)

    validation_errors = validate_config(config)
    if validation_errors:
        raise ConfigurationError(
            f"Ошибки валидации конфигурации: {'; '.join(validation_errors)}"
        )
    config.validate_connection()

    added_since, modified_since = resolve_time_range(config)

    # Шаблон компилируется до обращения к сети
    generator = MarkdownGenerator.from_template_file(config.template_file)

    logger.info(f"Подключение к Linkding: {config.linkding_url}")
    if added_since is not None:
        logger.info(f"Загрузка закладок, добавленных с {added_since:%Y-%m-%d}")
    bookmarks = asyncio.run(fetch_bookmarks(config, added_since, modified_since, transport))
    logger.info(f"Загружено закладок: {len(bookmarks)}")

    if not bookmarks:
        logger.warning("Не найдено закладок, удовлетворяющих условиям")

    written = write_output(generator, bookmarks, config.render_options(), config.output_file)

    duration = time.time() - start_time
    log_performance("run_fetch", duration, f"bookmarks={len(bookmarks)}, bytes={written}")
    return written


def run_init(args: argparse.Namespace) -> None:
    """
    Выполняет команду init.

    Аргументы:
        args: Аргументы командной строки
    """
    created = init_project(
        ".", env_file=args.env_file, template_file=args.template_file, force=args.force
    )
    env_path, template_path = created
    print("\nИнициализация завершена.\n", file=sys.stderr)
    print("Дальнейшие шаги:", file=sys.stderr)
    print(f"  1. Укажите адрес Linkding и API-токен в {env_path}", file=sys.stderr)
    print(f"  2. (Необязательно) Отредактируйте шаблон {template_path}", file=sys.stderr)
    print("  3. Запустите: linkding-to-markdown fetch --output bookmarks.md\n", file=sys.stderr)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Главная функция приложения.
    """
    args = parse_arguments(argv)
    log_function_call("main", (), {"command": args.command})

    try:
        if args.command == "init":
            run_init(args)
        else:
            run_fetch(args)

    except KeyboardInterrupt:
        logger.info("Программа прервана пользователем")
        sys.exit(130)
    except (LinkdingMarkdownError, OSError) as e:
        context = {"command": args.command}
        for attribute in ("offset", "page", "status_code", "lineno", "bytes_written", "filename"):
            value = getattr(e, attribute, None)
            if value is not None:
                context[attribute] = value
        log_error_with_context(e, context)
        sys.exit(1)


if __name__ == "__main__":
    main()
