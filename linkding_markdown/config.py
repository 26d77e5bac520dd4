"""
Модуль config.py
Управляет конфигурацией приложения через .env-файл.
Обеспечивает валидацию и доступ к параметрам конфигурации.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from dotenv import dotenv_values

from .dates import DEFAULT_DATE_FORMAT, parse_date
from .errors import ConfigurationError
from .logger import get_logger
from .models import RenderOptions

logger = get_logger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """
    Класс конфигурации приложения.
    Поля загружаются из .env-файла и могут быть переопределены аргументами командной строки.
    """

    # Подключение к Linkding
    linkding_url: str = ""
    linkding_token: str = field(default="", repr=False)
    linkding_timeout: float = 30.0

    # Временной диапазон и фильтр
    fetch_days: int = 7
    fetch_since: str = ""
    fetch_until: str = ""
    fetch_query: str = ""

    # Настройки вывода
    output_file: str = ""
    document_title: str = "Bookmarks"
    include_notes: bool = True
    include_tags: bool = True
    group_by_date: bool = True
    date_format: str = DEFAULT_DATE_FORMAT
    template_file: str = ""

    # Настройки логирования
    log_level: str = "INFO"
    log_file: str = ""

    def render_options(self) -> RenderOptions:
        """
        Собирает параметры генерации документа.

        Возвращает:
            RenderOptions: Параметры для шаблона
        """
        return RenderOptions(
            title=self.document_title,
            include_notes=self.include_notes,
            include_tags=self.include_tags,
            group_by_date=self.group_by_date,
            date_format=self.date_format,
        )

    def validate_connection(self) -> None:
        """
        Проверяет наличие параметров подключения к Linkding.

        Raises:
            ConfigurationError: Если не задан URL или токен
        """
        missing = []
        if not self.linkding_url:
            missing.append("LINKDING_URL (--url)")
        if not self.linkding_token:
            missing.append("LINKDING_TOKEN (--token)")
        if missing:
            error_msg = f"Не заданы обязательные параметры: {', '.join(missing)}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg)


def _as_bool(value: str) -> bool:
    return value.strip().lower() == "true"


class ConfigManager:
    """
    Менеджер конфигурации приложения.
    Загружает параметры из .env-файла и предоставляет валидацию.
    """

    def __init__(self, env_path: Optional[str] = None, validate: bool = True):
        """
        Инициализация менеджера конфигурации.

        Аргументы:
            env_path: Путь к .env-файлу (по умолчанию .env в текущей директории)
            validate: Проверить значения сразу. CLI передает False и проверяет
                конфигурацию после применения аргументов командной строки
        """
        logger.debug(f"Инициализация ConfigManager с env_path: {env_path}")

        path = env_path or ".env"
        if env_path and not os.path.exists(env_path):
            raise ConfigurationError(f"Файл конфигурации не найден: {env_path}")

        # Значения из файла имеют приоритет над окружением
        self.values: Dict[str, str] = dict(os.environ)
        self.values.update({k: v for k, v in dotenv_values(path).items() if v is not None})

        self.config = self._load_config()
        if validate:
            self._validate_config()

        logger.debug(
            f"Загружена конфигурация: url={self.config.linkding_url}, "
            f"log_level={self.config.log_level}"
        )

    def _get(self, key: str, default: str) -> str:
        return self.values.get(key, default)

    def _load_config(self) -> Config:
        """
        Загружает конфигурацию из переменных .env и окружения.

        Возвращает:
            Config: Объект с загруженной конфигурацией

        Raises:
            ConfigurationError: Если числовой параметр не удалось разобрать
        """
        logger.debug("Загрузка конфигурации из переменных окружения")

        try:
            config = Config(
                linkding_url=self._get("LINKDING_URL", "").strip(),
                linkding_token=self._get("LINKDING_TOKEN", "").strip(),
                linkding_timeout=float(self._get("LINKDING_TIMEOUT", "30")),
                fetch_days=int(self._get("FETCH_DAYS", "7")),
                fetch_since=self._get("FETCH_SINCE", "").strip(),
                fetch_until=self._get("FETCH_UNTIL", "").strip(),
                fetch_query=self._get("FETCH_QUERY", ""),
                output_file=self._get("OUTPUT_FILE", "").strip(),
                document_title=self._get("DOCUMENT_TITLE", "Bookmarks"),
                include_notes=_as_bool(self._get("INCLUDE_NOTES", "true")),
                include_tags=_as_bool(self._get("INCLUDE_TAGS", "true")),
                group_by_date=_as_bool(self._get("GROUP_BY_DATE", "true")),
                date_format=self._get("DATE_FORMAT", DEFAULT_DATE_FORMAT),
                template_file=self._get("TEMPLATE_FILE", "").strip(),
                log_level=self._get("LOG_LEVEL", "INFO").strip().upper(),
                log_file=self._get("LOG_FILE", "").strip(),
            )

            logger.debug("Конфигурация успешно загружена из переменных окружения")
            return config

        except ValueError as e:
            logger.error(f"Ошибка при загрузке конфигурации: {e}")
            raise ConfigurationError(f"Некорректное значение в конфигурации: {e}") from e

    def _validate_config(self) -> None:
        """
        Валидирует параметры конфигурации.
        Собирает все ошибки и вызывает одно исключение.

        Raises:
            ConfigurationError: Если параметры некорректны
        """
        logger.debug("Валидация конфигурации")
        validation_errors = validate_config(self.config)

        if validation_errors:
            for error_msg in validation_errors:
                logger.error(error_msg)
            raise ConfigurationError(
                f"Ошибки валидации конфигурации: {'; '.join(validation_errors)}"
            )

        logger.debug("Валидация конфигурации успешно пройдена")

    def get(self) -> Config:
        """
        Возвращает объект конфигурации.

        Возвращает:
            Config: Объект с конфигурацией
        """
        return self.config


def validate_config(config: Config) -> List[str]:
    """
    Проверяет значения конфигурации, не требующие сети.

    Аргументы:
        config: Проверяемая конфигурация

    Возвращает:
        list: Список сообщений об ошибках (пустой, если ошибок нет)
    """
    errors = []

    if config.linkding_timeout <= 0:
        errors.append(
            f"LINKDING_TIMEOUT должен быть положительным числом: {config.linkding_timeout}"
        )

    if config.fetch_days < 0:
        errors.append(f"FETCH_DAYS должен быть неотрицательным числом: {config.fetch_days}")

    for name, value in (("FETCH_SINCE", config.fetch_since), ("FETCH_UNTIL", config.fetch_until)):
        if value:
            try:
                parse_date(value)
            except ValueError:
                errors.append(f"{name} должен быть в формате YYYY-MM-DD: {value}")

    if not config.date_format:
        errors.append("DATE_FORMAT не может быть пустым")

    if config.log_level.upper() not in LOG_LEVELS:
        errors.append(f"LOG_LEVEL должен быть одним из {', '.join(LOG_LEVELS)}: {config.log_level}")

    return errors


def resolve_time_range(
    config: Config, now: Optional[datetime] = None
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Вычисляет границы выборки закладок.

    FETCH_SINCE имеет приоритет над FETCH_DAYS; FETCH_DAYS=0 отключает нижнюю границу.
    FETCH_UNTIL передается в API как modified_since.

    Аргументы:
        config: Конфигурация приложения
        now: Текущее время (для тестов)

    Возвращает:
        Tuple: (added_since, modified_since), каждая граница может быть None

    Raises:
        ConfigurationError: Если дата не в формате YYYY-MM-DD
    """
    now = now or datetime.now(timezone.utc)
    added_since = None
    modified_since = None

    try:
        if config.fetch_since:
            added_since = parse_date(config.fetch_since)
        elif config.fetch_days > 0:
            added_since = now - timedelta(days=config.fetch_days)

        if config.fetch_until:
            modified_since = parse_date(config.fetch_until)
    except ValueError as e:
        raise ConfigurationError(f"Некорректная дата (используйте YYYY-MM-DD): {e}") from e

    logger.debug(f"Временной диапазон: added_since={added_since}, modified_since={modified_since}")
    return added_since, modified_since
