"""
Модуль template.py
Компиляция и выполнение шаблонов документа (Jinja2).

В шаблоне доступны переменные Title, Generated, Bookmarks, GroupedBookmarks,
Options и вспомогательные функции из TEMPLATE_HELPERS:

    formatDate(value, pattern)  - форматирование даты (раскладка Go или strftime)
    join(items, separator)      - объединение строк, например тегов
    hasContent(text)            - строка содержит непробельные символы
    isBlank(text)               - строка пуста или состоит из пробелов
"""
import io
from pathlib import Path
from typing import Any, BinaryIO, Callable, Iterable, Mapping, Optional, Union

from jinja2 import Environment, StrictUndefined, TemplateError, TemplateSyntaxError

from .dates import format_date
from .errors import OutputError, TemplateCompileError, TemplateExecutionError
from .logger import get_logger, log_function_call
from .models import RenderContext

logger = get_logger(__name__)


def is_blank(text: Optional[str]) -> bool:
    """Проверяет, что строка пуста или состоит только из пробельных символов."""
    return text is None or not str(text).strip()


def has_content(text: Optional[str]) -> bool:
    """Проверяет, что в строке есть непробельные символы."""
    return not is_blank(text)


def join(items: Iterable[Any], separator: str) -> str:
    """Объединяет элементы через разделитель в исходном порядке."""
    return separator.join(str(item) for item in items)


TEMPLATE_HELPERS: Mapping[str, Callable[..., Any]] = {
    "formatDate": format_date,
    "join": join,
    "hasContent": has_content,
    "isBlank": is_blank,
}

DEFAULT_TEMPLATE = """\
{% macro entry(bookmark, options) %}
- [{{ bookmark.title or bookmark.website_title or bookmark.url }}]({{ bookmark.url }})
{% set description = bookmark.description if hasContent(bookmark.description) else bookmark.website_description %}
{% if hasContent(description) %}
  {{ description | trim | replace("\\n", "\\n  ") }}
{% endif %}
{% if options.include_notes and hasContent(bookmark.notes) %}
  > {{ bookmark.notes | trim | replace("\\n", "\\n  > ") }}
{% endif %}
{% if options.include_tags and bookmark.tag_names %}
  Tags: {{ join(bookmark.tag_names, ", ") }}
{% endif %}
{% endmacro %}
# {{ Title }}

_Generated: {{ Generated }}_

{% if not Bookmarks %}
No bookmarks found.
{% elif Options.group_by_date %}
{% for date, items in GroupedBookmarks | dictsort(reverse=true) %}
## {{ date }}

{% for bookmark in items %}
{{ entry(bookmark, Options) -}}
{% endfor %}

{% endfor %}
{% else %}
{% for bookmark in Bookmarks %}
{{ entry(bookmark, Options) -}}
{% endfor %}
{% endif %}
"""


class TemplateRenderer:
    """
    Скомпилированный шаблон документа.
    Компилируется один раз, выполняется любое число раз.

    Аргументы:
        source: Текст шаблона
        helpers: Таблица вспомогательных функций (по умолчанию TEMPLATE_HELPERS)
        name: Имя шаблона для сообщений

    Raises:
        TemplateCompileError: Если шаблон синтаксически некорректен
    """

    def __init__(
        self,
        source: str,
        helpers: Optional[Mapping[str, Callable[..., Any]]] = None,
        name: str = "markdown",
    ):
        self.name = name
        self.environment = Environment(
            undefined=StrictUndefined,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.environment.globals.update(TEMPLATE_HELPERS if helpers is None else helpers)

        try:
            self.template = self.environment.from_string(source)
        except TemplateSyntaxError as e:
            raise TemplateCompileError(
                f"Ошибка синтаксиса в шаблоне '{name}': {e.message}", lineno=e.lineno
            ) from e

        logger.debug(f"Шаблон '{name}' скомпилирован")

    @classmethod
    def default(cls, helpers: Optional[Mapping[str, Callable[..., Any]]] = None) -> "TemplateRenderer":
        """Создает рендерер со встроенным шаблоном."""
        return cls(DEFAULT_TEMPLATE, helpers=helpers, name="default")

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        helpers: Optional[Mapping[str, Callable[..., Any]]] = None,
    ) -> "TemplateRenderer":
        """
        Создает рендерер из файла шаблона.

        Аргументы:
            path: Путь к файлу шаблона
            helpers: Таблица вспомогательных функций

        Raises:
            TemplateCompileError: Если файл не прочитан или шаблон некорректен
        """
        log_function_call("TemplateRenderer.from_file", (str(path),))
        try:
            source = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateCompileError(f"Не удалось прочитать файл шаблона {path}: {e}") from e
        return cls(source, helpers=helpers, name=str(path))

    def render(self, context: RenderContext, sink: BinaryIO) -> int:
        """
        Выполняет шаблон и по частям пишет результат в приемник.

        При ошибке выполнения часть вывода уже может быть записана.

        Аргументы:
            context: Контекст генерации
            sink: Двоичный приемник (файл, sys.stdout.buffer, BytesIO)

        Возвращает:
            int: Количество записанных байт

        Raises:
            TemplateExecutionError: Ошибка при подстановке данных
            OutputError: Приемник не принял запись
        """
        bytes_written = 0
        try:
            for chunk in self.template.generate(**context.as_template_vars()):
                data = chunk.encode("utf-8")
                try:
                    sink.write(data)
                except (OSError, ValueError) as e:
                    raise OutputError(f"Не удалось записать вывод: {e}") from e
                bytes_written += len(data)
        except (TemplateError, TypeError, ValueError, AttributeError, KeyError, IndexError) as e:
            raise TemplateExecutionError(
                f"Ошибка выполнения шаблона '{self.name}': {e}", bytes_written=bytes_written
            ) from e

        logger.debug(f"Шаблон '{self.name}' выполнен, записано {bytes_written} байт")
        return bytes_written

    def render_to_bytes(self, context: RenderContext) -> bytes:
        """Выполняет шаблон и возвращает результат целиком."""
        buffer = io.BytesIO()
        self.render(context, buffer)
        return buffer.getvalue()
