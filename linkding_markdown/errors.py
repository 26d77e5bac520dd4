"""
Модуль errors.py
Иерархия исключений приложения.
Каждый вид ошибки прерывает текущую операцию и несет контекст для диагностики.
"""
from typing import Optional


class LinkdingMarkdownError(Exception):
    """Базовое исключение приложения."""


class ConfigurationError(LinkdingMarkdownError, ValueError):
    """
    Отсутствуют или некорректны параметры конфигурации.
    Обнаруживается до любого сетевого запроса.
    """


class FetchError(LinkdingMarkdownError):
    """
    Общий предок ошибок загрузки страниц закладок.

    Атрибуты:
        offset: Смещение страницы, на которой произошла ошибка
        page: Порядковый номер страницы (с нуля)
    """

    def __init__(self, message: str, offset: Optional[int] = None, page: Optional[int] = None):
        if offset is not None:
            message = f"{message} (offset={offset}, page={page})"
        super().__init__(message)
        self.offset = offset
        self.page = page


class LinkdingConnectionError(FetchError):
    """Транспортная ошибка: таймаут, DNS, отказ в соединении."""


class APIError(FetchError):
    """
    Сервер вернул статус, отличный от 200.

    Атрибуты:
        status_code: HTTP-статус ответа
        body: Тело ответа
    """

    def __init__(
        self,
        status_code: int,
        body: str,
        offset: Optional[int] = None,
        page: Optional[int] = None,
    ):
        super().__init__(
            f"API вернул статус {status_code}: {body[:500]}", offset=offset, page=page
        )
        self.status_code = status_code
        self.body = body


class DecodeError(FetchError):
    """Ответ не является корректным JSON или не соответствует схеме."""


class TemplateCompileError(LinkdingMarkdownError):
    """
    Шаблон синтаксически некорректен.

    Атрибуты:
        lineno: Номер строки с ошибкой, если известен
    """

    def __init__(self, message: str, lineno: Optional[int] = None):
        if lineno is not None:
            message = f"{message} (строка {lineno})"
        super().__init__(message)
        self.lineno = lineno


class TemplateExecutionError(LinkdingMarkdownError):
    """
    Ошибка во время подстановки данных в корректный шаблон.
    Часть вывода к этому моменту уже может быть записана.

    Атрибуты:
        bytes_written: Сколько байт успело попасть в приемник
    """

    def __init__(self, message: str, bytes_written: int = 0):
        super().__init__(f"{message} (записано байт: {bytes_written})")
        self.bytes_written = bytes_written


class OutputError(LinkdingMarkdownError):
    """Приемник вывода не удалось создать или записать."""
