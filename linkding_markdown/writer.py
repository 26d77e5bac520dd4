"""
Модуль writer.py
Генерация Markdown-документа из закладок и запись результата в файл или stdout.
"""

import os
import stat
import sys
import tempfile
import time
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Optional, Sequence, Union

from .errors import OutputError
from .logger import (
    get_logger,
    log_error_with_context,
    log_function_call,
    log_performance,
)
from .models import Bookmark, RenderOptions
from .render import build_render_context
from .template import TemplateRenderer

logger = get_logger(__name__)


class MarkdownGenerator:
    """
    Генератор документа: собирает контекст и выполняет шаблон.

    Аргументы:
        renderer: Скомпилированный шаблон (по умолчанию встроенный)
    """

    def __init__(self, renderer: Optional[TemplateRenderer] = None):
        self.renderer = renderer or TemplateRenderer.default()

    @classmethod
    def from_template_file(cls, template_path: Optional[Union[str, Path]] = None) -> "MarkdownGenerator":
        """
        Создает генератор из файла шаблона или со встроенным шаблоном.

        Аргументы:
            template_path: Путь к файлу шаблона (None или "" - встроенный)
        """
        if template_path:
            logger.info(f"Используется пользовательский шаблон: {template_path}")
            return cls(TemplateRenderer.from_file(template_path))
        return cls()

    def generate(
        self,
        sink: BinaryIO,
        bookmarks: Sequence[Bookmark],
        options: RenderOptions,
        now: Optional[datetime] = None,
    ) -> int:
        """
        Генерирует документ и пишет его в приемник.

        Аргументы:
            sink: Двоичный приемник
            bookmarks: Закладки в порядке поступления
            options: Параметры генерации
            now: Время генерации (для тестов)

        Возвращает:
            int: Количество записанных байт
        """
        log_function_call(
            "MarkdownGenerator.generate",
            (),
            {"bookmarks_count": len(bookmarks), "group_by_date": options.group_by_date},
        )
        context = build_render_context(bookmarks, options, now=now)
        return self.renderer.render(context, sink)


def _file_mode(file_path: Path) -> int:
    # tempfile создает файл с правами 0600; результат получает права
    # заменяемого файла, а новый файл - 0666 с учетом umask
    try:
        return stat.S_IMODE(os.stat(file_path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_output(
    generator: MarkdownGenerator,
    bookmarks: Sequence[Bookmark],
    options: RenderOptions,
    output_path: Optional[Union[str, Path]] = None,
) -> int:
    """
    Записывает документ в файл или в стандартный вывод.

    Файл пишется во временный файл рядом с целевым и переименовывается только
    после успешной генерации, поэтому при ошибке прежнее содержимое сохраняется.

    Аргументы:
        generator: Генератор документа
        bookmarks: Закладки
        options: Параметры генерации
        output_path: Путь к файлу (None или "" - stdout)

    Возвращает:
        int: Количество записанных байт

    Raises:
        OutputError: Если файл не удалось создать или записать
    """
    start_time = time.time()
    log_function_call("write_output", (), {"output_path": output_path})

    if not output_path:
        written = generator.generate(sys.stdout.buffer, bookmarks, options)
        try:
            sys.stdout.buffer.flush()
        except OSError as e:
            raise OutputError(f"Не удалось записать в stdout: {e}") from e
        return written

    file_path = Path(output_path)
    tmp_name = None
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=file_path.parent,
            prefix=f".{file_path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            written = generator.generate(tmp, bookmarks, options)
        os.chmod(tmp_name, _file_mode(file_path))
        os.replace(tmp_name, file_path)
        tmp_name = None

    except OSError as e:
        log_error_with_context(e, {"file_path": str(file_path), "operation": "write_output"})
        raise OutputError(f"Не удалось записать файл {file_path}: {e}") from e

    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)

    duration = time.time() - start_time
    log_performance("write_output", duration, f"file={file_path}, size={written}")
    logger.info(f"Файл успешно сохранен: {file_path} (размер: {written} байт)")
    return written
