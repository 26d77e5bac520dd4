"""
Модуль render.py
Подготовка данных для шаблона: заголовок, время генерации, список закладок
и группировка закладок по дате добавления.
"""
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from .dates import format_date, format_rfc3339
from .logger import get_logger
from .models import Bookmark, RenderContext, RenderOptions

logger = get_logger(__name__)


def group_by_date(bookmarks: Sequence[Bookmark], date_format: str) -> Dict[str, List[Bookmark]]:
    """
    Группирует закладки по отформатированной дате добавления.

    Внутри группы сохраняется исходный относительный порядок. Порядок самих
    групп не гарантируется: сортировкой для вывода занимается шаблон.

    Аргументы:
        bookmarks: Закладки в исходном порядке
        date_format: Шаблон даты для ключа группы

    Возвращает:
        Dict[str, List[Bookmark]]: Ключ даты -> закладки этой даты
    """
    grouped: Dict[str, List[Bookmark]] = {}
    for bookmark in bookmarks:
        key = format_date(bookmark.date_added, date_format)
        grouped.setdefault(key, []).append(bookmark)
    return grouped


def build_render_context(
    bookmarks: Sequence[Bookmark],
    options: RenderOptions,
    now: Optional[datetime] = None,
) -> RenderContext:
    """
    Собирает контекст для шаблона. Не выполняет ввода-вывода.

    Аргументы:
        bookmarks: Все загруженные закладки
        options: Параметры генерации
        now: Время генерации (по умолчанию текущее локальное)

    Возвращает:
        RenderContext: Контекст для одного запуска шаблона
    """
    generated = now or datetime.now().astimezone()
    grouped = group_by_date(bookmarks, options.date_format) if options.group_by_date else None

    if grouped is not None:
        logger.debug(f"Закладки сгруппированы: {len(bookmarks)} закладок, {len(grouped)} дат")

    return RenderContext(
        title=options.title,
        generated=format_rfc3339(generated),
        bookmarks=tuple(bookmarks),
        options=options,
        grouped_bookmarks=grouped,
    )
