"""
Общие фикстуры для тестов.
Содержит вспомогательные функции для создания закладок и имитации API Linkding.
"""
import json
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from linkding_markdown.config import Config
from linkding_markdown.models import Bookmark

CONFIG_KEYS = [
    "LINKDING_URL", "LINKDING_TOKEN", "LINKDING_TIMEOUT",
    "FETCH_DAYS", "FETCH_SINCE", "FETCH_UNTIL", "FETCH_QUERY",
    "OUTPUT_FILE", "DOCUMENT_TITLE", "INCLUDE_NOTES", "INCLUDE_TAGS",
    "GROUP_BY_DATE", "DATE_FORMAT", "TEMPLATE_FILE", "LOG_LEVEL", "LOG_FILE",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Убирает переменные окружения приложения, чтобы тесты не зависели от машины."""
    for key in CONFIG_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def temp_dir():
    """Создает временную директорию для тестов."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def sample_env(temp_dir):
    """Создает тестовый .env файл."""
    env_file = temp_dir / ".env"
    env_file.write_text(
        f"""
LINKDING_URL=https://links.example.com
LINKDING_TOKEN=secret-token
LINKDING_TIMEOUT=15
FETCH_DAYS=3
FETCH_QUERY=python
DOCUMENT_TITLE=Weekly links
INCLUDE_NOTES=false
DATE_FORMAT=Jan 2, 2006
LOG_LEVEL=debug
LOG_FILE={temp_dir}/test.log
""",
        encoding="utf-8",
    )
    return str(env_file)


@pytest.fixture
def config():
    """Возвращает конфигурацию для тестов клиента и CLI."""
    return Config(
        linkding_url="https://links.example.com",
        linkding_token="secret-token",
        linkding_timeout=5,
    )


def bookmark_payload(
    bookmark_id: int = 1,
    date_added: str = "2025-01-01T10:00:00Z",
    **overrides,
) -> Dict:
    """Создает запись закладки в формате API Linkding."""
    payload = {
        "id": bookmark_id,
        "url": f"https://example.com/{bookmark_id}",
        "title": f"Bookmark {bookmark_id}",
        "description": "",
        "notes": "",
        "website_title": None,
        "website_description": None,
        "is_archived": False,
        "unread": False,
        "shared": False,
        "tag_names": [],
        "date_added": date_added,
        "date_modified": date_added,
    }
    payload.update(overrides)
    return payload


def create_test_bookmark(
    bookmark_id: int = 1, date_added: str = "2025-01-01T10:00:00Z", **overrides
) -> Bookmark:
    """Создает тестовую закладку."""
    return Bookmark.model_validate(bookmark_payload(bookmark_id, date_added, **overrides))


def page_response(results: List[Dict], count: Optional[int] = None) -> Dict:
    """Создает тело ответа со страницей закладок."""
    return {
        "count": len(results) if count is None else count,
        "next": None,
        "previous": None,
        "results": results,
    }


class MockLinkdingServer:
    """
    Имитация API Linkding для httpx.MockTransport.
    Отдает срез из заранее заданного списка закладок по limit/offset.
    """

    def __init__(self, total: int = 0, responder: Optional[Callable] = None):
        self.bookmarks = [bookmark_payload(i + 1) for i in range(total)]
        self.requests: List[httpx.Request] = []
        self.responder = responder

    @property
    def offsets(self) -> List[int]:
        return [int(r.url.params.get("offset", "0")) for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responder is not None:
            response = self.responder(request, len(self.requests) - 1)
            if response is not None:
                return response

        limit = int(request.url.params.get("limit", "100"))
        offset = int(request.url.params.get("offset", "0"))
        results = self.bookmarks[offset:offset + limit]
        return httpx.Response(
            200,
            content=json.dumps(page_response(results, count=len(self.bookmarks))),
            headers={"content-type": "application/json"},
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


FIXED_NOW = datetime(2025, 1, 10, 12, 0, 0, tzinfo=timezone.utc)
