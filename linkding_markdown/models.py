"""
Модуль models.py
Содержит модели данных для работы с закладками Linkding.
Ответ API разбирается через pydantic, внутренние структуры описаны dataclass.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from .dates import DEFAULT_DATE_FORMAT


class Bookmark(BaseModel):
    """
    Одна закладка в том виде, в каком ее вернул API.
    Экземпляр неизменяем после разбора ответа.

    Атрибуты:
        id: Идентификатор закладки
        url: URL-адрес страницы
        title: Заголовок, заданный пользователем
        description: Описание, заданное пользователем
        notes: Заметки пользователя
        website_title: Заголовок, полученный с сайта
        website_description: Описание, полученное с сайта
        is_archived: Закладка в архиве
        unread: Закладка помечена как непрочитанная
        shared: Закладка опубликована
        tag_names: Теги в порядке, полученном от API
        date_added: Дата добавления
        date_modified: Дата изменения
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    url: str = ""
    title: str = ""
    description: str = ""
    notes: str = ""
    website_title: str = ""
    website_description: str = ""
    is_archived: bool = False
    unread: bool = False
    shared: bool = False
    tag_names: Tuple[str, ...] = ()
    date_added: datetime
    date_modified: datetime

    @field_validator(
        "url", "title", "description", "notes", "website_title", "website_description",
        mode="before",
    )
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        # Linkding отдает null для website_* у незагруженных страниц
        return "" if value is None else value


class BookmarksPage(BaseModel):
    """Одна страница ответа GET /api/bookmarks/."""

    model_config = ConfigDict(extra="ignore")

    count: int
    next: Optional[str]
    previous: Optional[str]
    results: List[Bookmark]


@dataclass
class RenderOptions:
    """
    Параметры генерации документа.

    Атрибуты:
        title: Заголовок документа
        include_notes: Подсказка шаблону выводить заметки
        include_tags: Подсказка шаблону выводить теги
        group_by_date: Группировать закладки по дате добавления
        date_format: Шаблон даты для ключа группировки
    """
    title: str = "Bookmarks"
    include_notes: bool = True
    include_tags: bool = True
    group_by_date: bool = True
    date_format: str = DEFAULT_DATE_FORMAT


@dataclass(frozen=True)
class RenderContext:
    """
    Данные для одного запуска шаблона.

    Атрибуты:
        title: Заголовок документа
        generated: Время генерации в RFC 3339
        bookmarks: Все закладки в исходном порядке
        grouped_bookmarks: Закладки по ключу даты, None без группировки
        options: Параметры генерации
    """
    title: str
    generated: str
    bookmarks: Tuple[Bookmark, ...]
    options: RenderOptions
    grouped_bookmarks: Optional[Dict[str, List[Bookmark]]] = field(default=None)

    def as_template_vars(self) -> Dict[str, Any]:
        """Возвращает контекст под именами, доступными в шаблоне."""
        return {
            "Title": self.title,
            "Generated": self.generated,
            "Bookmarks": self.bookmarks,
            "GroupedBookmarks": self.grouped_bookmarks,
            "Options": self.options,
        }
