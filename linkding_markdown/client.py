"""
Модуль client.py
Клиент REST API Linkding.
Постранично загружает закладки с фильтрами и сохраняет порядок их поступления.
"""
import time
from datetime import datetime
from typing import Dict, List, Optional

import httpx
from pydantic import ValidationError

from . import __version__
from .config import Config
from .dates import format_rfc3339
from .errors import APIError, ConfigurationError, DecodeError, LinkdingConnectionError
from .logger import get_logger, log_function_call, log_performance
from .models import Bookmark, BookmarksPage

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 100
BOOKMARKS_ENDPOINT = "/api/bookmarks/"


class LinkdingClient:
    """
    Асинхронный клиент API Linkding.
    Используется как асинхронный контекстный менеджер:

        async with LinkdingClient(url, token) as client:
            bookmarks = await client.fetch_all_bookmarks(query="python")

    Аргументы:
        base_url: Адрес экземпляра Linkding
        token: API-токен пользователя
        timeout: Таймаут одного запроса в секундах
        page_size: Размер страницы (параметр limit)
        transport: Транспорт httpx (подменяется в тестах)
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not base_url:
            raise ConfigurationError("Не задан URL экземпляра Linkding")
        if not token:
            raise ConfigurationError("Не задан API-токен Linkding")
        if page_size <= 0:
            raise ConfigurationError(f"Размер страницы должен быть положительным: {page_size}")

        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = httpx.Timeout(timeout)
        self.page_size = page_size
        self.session: Optional[httpx.AsyncClient] = None
        self._transport = transport

        logger.debug(
            f"LinkdingClient инициализирован: base_url={self.base_url}, "
            f"timeout={timeout}s, page_size={page_size}"
        )

    @classmethod
    def from_config(
        cls, config: Config, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "LinkdingClient":
        """
        Создает клиента по конфигурации приложения.

        Аргументы:
            config: Объект конфигурации
            transport: Транспорт httpx (необязательно)

        Возвращает:
            LinkdingClient: Настроенный клиент
        """
        return cls(
            config.linkding_url,
            config.linkding_token,
            config.linkding_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "LinkdingClient":
        self.session = httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Token {self.token}",
                "Accept": "application/json",
                "User-Agent": f"linkding-to-markdown/{__version__}",
            },
        )
        logger.debug("HTTP сессия создана для LinkdingClient")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.session:
            await self.session.aclose()
            self.session = None
            logger.debug("HTTP сессия закрыта для LinkdingClient")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}{BOOKMARKS_ENDPOINT}"

    @staticmethod
    def build_params(
        query: str = "",
        added_since: Optional[datetime] = None,
        modified_since: Optional[datetime] = None,
        limit: int = 0,
        offset: int = 0,
    ) -> Dict[str, str]:
        """
        Собирает параметры запроса; параметры по умолчанию не передаются.

        Возвращает:
            Dict[str, str]: Параметры строки запроса
        """
        params: Dict[str, str] = {}
        if query:
            params["q"] = query
        if added_since is not None:
            params["added_since"] = format_rfc3339(added_since)
        if modified_since is not None:
            params["modified_since"] = format_rfc3339(modified_since)
        if limit > 0:
            params["limit"] = str(limit)
        if offset > 0:
            params["offset"] = str(offset)
        return params

    async def fetch_bookmarks(
        self,
        query: str = "",
        added_since: Optional[datetime] = None,
        modified_since: Optional[datetime] = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        page: int = 0,
    ) -> BookmarksPage:
        """
        Загружает одну страницу закладок.

        Аргументы:
            query: Строка поиска
            added_since: Нижняя граница даты добавления
            modified_since: Нижняя граница даты изменения
            limit: Размер страницы
            offset: Смещение страницы
            page: Номер страницы (только для сообщений об ошибках)

        Возвращает:
            BookmarksPage: Разобранный ответ API

        Raises:
            LinkdingConnectionError: Транспортная ошибка или таймаут
            APIError: Статус ответа отличен от 200
            DecodeError: Ответ не JSON или не соответствует схеме
        """
        if self.session is None:
            raise RuntimeError(
                "Сессия не создана. Используйте async with LinkdingClient(...) as client:"
            )

        params = self.build_params(query, added_since, modified_since, limit, offset)
        log_function_call("fetch_bookmarks", (), params)

        try:
            response = await self.session.get(self.endpoint, params=params)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise ConfigurationError(f"Некорректный URL Linkding: {self.base_url}: {e}") from e
        except httpx.TimeoutException as e:
            raise LinkdingConnectionError(
                f"Таймаут запроса к {self.endpoint}: {e}", offset=offset, page=page
            ) from e
        except httpx.TransportError as e:
            raise LinkdingConnectionError(
                f"Не удалось выполнить запрос к {self.endpoint}: {e}", offset=offset, page=page
            ) from e

        if response.status_code != 200:
            raise APIError(response.status_code, response.text, offset=offset, page=page)

        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError(f"Ответ API не является JSON: {e}", offset=offset, page=page) from e

        try:
            return BookmarksPage.model_validate(payload)
        except ValidationError as e:
            raise DecodeError(
                f"Ответ API не соответствует схеме: {e.error_count()} ошибок: {e}",
                offset=offset,
                page=page,
            ) from e

    async def fetch_all_bookmarks(
        self,
        query: str = "",
        added_since: Optional[datetime] = None,
        modified_since: Optional[datetime] = None,
    ) -> List[Bookmark]:
        """
        Загружает все закладки, удовлетворяющие фильтрам.

        Страницы запрашиваются строго последовательно. Обход прекращается на
        пустой странице или на странице короче page_size. Любая ошибка
        прерывает загрузку целиком, уже полученные страницы отбрасываются.

        Аргументы:
            query: Строка поиска
            added_since: Нижняя граница даты добавления
            modified_since: Нижняя граница даты изменения

        Возвращает:
            List[Bookmark]: Закладки в порядке поступления
        """
        start_time = time.time()
        all_bookmarks: List[Bookmark] = []
        offset = 0
        page = 0

        # Окно offset/limit может сдвинуться, если на сервере параллельно добавляют закладки
        while True:
            result = await self.fetch_bookmarks(
                query, added_since, modified_since, self.page_size, offset, page=page
            )
            bookmarks = result.results
            logger.debug(
                f"Страница {page} (offset={offset}): получено {len(bookmarks)} закладок, "
                f"всего на сервере: {result.count}"
            )

            if not bookmarks:
                break

            all_bookmarks.extend(bookmarks)

            if len(bookmarks) < self.page_size:
                break

            offset += self.page_size
            page += 1

        duration = time.time() - start_time
        log_performance(
            "fetch_all_bookmarks", duration, f"pages={page + 1}, bookmarks={len(all_bookmarks)}"
        )
        return all_bookmarks
