"""
Модуль logger.py
Настройка логирования linkding-to-markdown.

Все сообщения идут в stderr: stdout может быть занят документом, если
--output не указан. При заданном LOG_FILE дополнительно пишется файл с ротацией.
"""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from .config import Config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Ротация файла лога: 10 МБ, 5 архивных копий
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 5

# Библиотеки, которые на INFO пишут по строке на каждый HTTP-запрос
NOISY_LOGGERS = ("httpx", "httpcore")


class LoggerManager:
    """
    Единая точка настройки обработчиков корневого логгера (Singleton).

    Повторный вызов setup_logging заменяет обработчики, а не добавляет
    новые, поэтому его можно вызывать после переопределения уровня из CLI.
    """

    _instance: Optional['LoggerManager'] = None
    handlers: List[logging.Handler]

    def __new__(cls) -> 'LoggerManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.handlers = []
        return cls._instance

    def setup_logging(self, config: 'Config') -> None:
        """
        Настраивает корневой логгер по конфигурации.

        Аргументы:
            config: Конфигурация приложения (log_level, log_file)
        """
        root = logging.getLogger()
        root.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

        for handler in self.handlers:
            handler.close()
        root.handlers.clear()

        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        self.handlers = [logging.StreamHandler(sys.stderr)]
        if config.log_file:
            self.handlers.append(self._file_handler(Path(config.log_file)))

        for handler in self.handlers:
            handler.setFormatter(formatter)
            root.addHandler(handler)

        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        logger = logging.getLogger(__name__)
        logger.debug(f"Логирование настроено: уровень {config.log_level}")
        if config.log_file:
            logger.debug(f"Файл лога: {config.log_file}")

    @staticmethod
    def _file_handler(log_path: Path) -> logging.Handler:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        return logging.handlers.RotatingFileHandler(
            filename=log_path,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )


def get_logger(name: str) -> logging.Logger:
    """
    Возвращает логгер модуля.

    Пример:
        >>> logger = get_logger(__name__)
        >>> logger.info("Загружено закладок: 42")
    """
    return logging.getLogger(name)


def setup_logging(config: 'Config') -> None:
    """Настраивает логирование приложения. Вызывается из CLI при старте команды."""
    LoggerManager().setup_logging(config)


def log_function_call(func_name: str, args: tuple = (), kwargs: Optional[dict] = None) -> None:
    """
    Пишет в DEBUG вызов функции с аргументами.
    Аргументы форматируются только при включенном DEBUG.
    """
    logger = get_logger(__name__)
    if not logger.isEnabledFor(logging.DEBUG):
        return

    parts = [str(arg) for arg in args]
    parts.extend(f"{key}={value}" for key, value in (kwargs or {}).items())
    logger.debug(f"Вызов функции: {func_name}({', '.join(parts)})")


def log_performance(func_name: str, duration: float, details: str = "") -> None:
    """
    Пишет в INFO длительность операции.

    Аргументы:
        func_name: Название операции
        duration: Длительность в секундах
        details: Размеры результата и т.п.
    """
    suffix = f" ({details})" if details else ""
    get_logger(__name__).info(
        f"Производительность: {func_name} выполнена за {duration:.2f}с{suffix}"
    )


def log_error_with_context(error: Exception, context: Dict[str, Any]) -> None:
    """
    Пишет в ERROR исключение вместе с контекстом операции.

    Аргументы:
        error: Исключение
        context: Например {"offset": 100, "page": 1} для ошибки загрузки
    """
    details = ", ".join(f"{key}={value}" for key, value in context.items())
    get_logger(__name__).error(
        f"Ошибка: {type(error).__name__}: {error} | Контекст: {details}"
    )
