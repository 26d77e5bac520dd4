"""
Модуль scaffold.py
Создание стартовых файлов: .env с настройками и редактируемая копия шаблона.
"""
from pathlib import Path
from typing import List, Union

from .logger import get_logger
from .template import DEFAULT_TEMPLATE

logger = get_logger(__name__)

DEFAULT_ENV_FILE = ".env"
DEFAULT_TEMPLATE_FILE = "linkding-to-markdown.md"

DEFAULT_ENV_CONTENT = """\
# Настройки linkding-to-markdown
# Параметры командной строки имеют приоритет над значениями из этого файла

# Адрес экземпляра Linkding (обязательно)
LINKDING_URL=https://linkding.example.com

# API-токен (Linkding: Settings -> Integrations)
LINKDING_TOKEN=your-api-token-here

# Таймаут HTTP-запроса, секунды
LINKDING_TIMEOUT=30

# Сколько дней назад начинать выборку (0 - без ограничения)
FETCH_DAYS=7

# Или явный диапазон в формате YYYY-MM-DD
# FETCH_SINCE=2025-01-01
# FETCH_UNTIL=2025-01-31

# Поисковый запрос
# FETCH_QUERY=python

# Файл результата (пусто - stdout)
# OUTPUT_FILE=bookmarks.md

# Заголовок документа
DOCUMENT_TITLE=Bookmarks

# Параметры вывода
INCLUDE_NOTES=true
INCLUDE_TAGS=true
GROUP_BY_DATE=true

# Формат даты: раскладка Go (2006-01-02) или strftime (%Y-%m-%d)
DATE_FORMAT=2006-01-02

# Файл шаблона (пусто - встроенный шаблон)
TEMPLATE_FILE={template_file}

# Логирование
LOG_LEVEL=INFO
# LOG_FILE=./linkding-to-markdown.log
"""


def init_project(
    directory: Union[str, Path] = ".",
    env_file: str = DEFAULT_ENV_FILE,
    template_file: str = DEFAULT_TEMPLATE_FILE,
    force: bool = False,
) -> List[Path]:
    """
    Создает файл настроек и файл шаблона.

    Аргументы:
        directory: Каталог, в котором создаются файлы
        env_file: Имя файла настроек
        template_file: Имя файла шаблона
        force: Перезаписывать существующие файлы

    Возвращает:
        List[Path]: Пути созданных файлов

    Raises:
        FileExistsError: Если файл уже существует и force не задан
    """
    base = Path(directory)
    env_path = base / env_file
    template_path = base / template_file

    for path in (env_path, template_path):
        if path.exists() and not force:
            raise FileExistsError(
                f"Файл {path} уже существует (используйте --force для перезаписи)"
            )

    base.mkdir(parents=True, exist_ok=True)
    created = []
    for path, content in (
        (env_path, DEFAULT_ENV_CONTENT.format(template_file=template_file)),
        (template_path, DEFAULT_TEMPLATE),
    ):
        existed = path.exists()
        path.write_text(content, encoding="utf-8")
        logger.info(f"{'Перезаписан' if existed else 'Создан'} файл: {path}")
        created.append(path)

    return created
