"""
Модуль dates.py
Форматирование и разбор дат.

Шаблон даты задается в стиле эталонной раскладки Go
("2006-01-02", "Jan 2, 2006", "2006-01-02T15:04:05Z07:00"), как это принято в
конфигурации Linkding-утилит. Если шаблон содержит символ "%", он считается
шаблоном strftime и передается в datetime.strftime без изменений.
"""
import re
from datetime import datetime, timezone
from functools import lru_cache, partial
from typing import Callable, List, Tuple, Union

RFC3339 = "2006-01-02T15:04:05Z07:00"
DEFAULT_DATE_FORMAT = "2006-01-02"

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# Дробная часть секунд: ".000" (фиксированная ширина) или ".999" (без хвостовых нулей)
_FRACTION = re.compile(r"[.,](0+|9+)(?![0-9])")


def _offset_minutes(value: datetime) -> int:
    offset = value.utcoffset()
    if offset is None:
        return 0
    return int(offset.total_seconds()) // 60


def _zone(value: datetime, separator: str, utc_as_z: bool, with_minutes: bool = True) -> str:
    minutes = _offset_minutes(value)
    if utc_as_z and minutes == 0:
        return "Z"
    sign = "-" if minutes < 0 else "+"
    hours, mins = divmod(abs(minutes), 60)
    if not with_minutes:
        return f"{sign}{hours:02d}"
    return f"{sign}{hours:02d}{separator}{mins:02d}"


def _zone_name(value: datetime) -> str:
    name = value.tzname()
    if not name or name == "UTC":
        return "UTC" if _offset_minutes(value) == 0 else _zone(value, "", False)
    if name.startswith("UTC"):
        # Безымянная фиксированная зона: Go выводит смещение
        return _zone(value, "", False)
    return name


def _hour12(value: datetime) -> int:
    return value.hour % 12 or 12


def _fraction(separator: str, digits: int, trim: bool, value: datetime) -> str:
    nanos = f"{value.microsecond * 1000:09d}"[:digits]
    if trim:
        nanos = nanos.rstrip("0")
        if not nanos:
            return ""
    return f"{separator}{nanos}"


# Порядок важен: более длинные элементы проверяются раньше их префиксов
_GO_TOKENS: Tuple[Tuple[str, Callable[[datetime], str]], ...] = (
    ("January", lambda v: _MONTHS[v.month - 1]),
    ("Monday", lambda v: _WEEKDAYS[v.weekday()]),
    ("Jan", lambda v: _MONTHS[v.month - 1][:3]),
    ("Mon", lambda v: _WEEKDAYS[v.weekday()][:3]),
    ("MST", _zone_name),
    ("2006", lambda v: f"{v.year:04d}"),
    ("Z07:00", lambda v: _zone(v, ":", True)),
    ("Z0700", lambda v: _zone(v, "", True)),
    ("Z07", lambda v: _zone(v, "", True, with_minutes=False)),
    ("-07:00", lambda v: _zone(v, ":", False)),
    ("-0700", lambda v: _zone(v, "", False)),
    ("-07", lambda v: _zone(v, "", False, with_minutes=False)),
    ("002", lambda v: f"{v.timetuple().tm_yday:03d}"),
    ("01", lambda v: f"{v.month:02d}"),
    ("02", lambda v: f"{v.day:02d}"),
    ("03", lambda v: f"{_hour12(v):02d}"),
    ("04", lambda v: f"{v.minute:02d}"),
    ("05", lambda v: f"{v.second:02d}"),
    ("06", lambda v: f"{v.year % 100:02d}"),
    ("15", lambda v: f"{v.hour:02d}"),
    ("_2", lambda v: f"{v.day:>2d}"),
    ("1", lambda v: str(v.month)),
    ("2", lambda v: str(v.day)),
    ("3", lambda v: str(_hour12(v))),
    ("4", lambda v: str(v.minute)),
    ("5", lambda v: str(v.second)),
    ("PM", lambda v: "PM" if v.hour >= 12 else "AM"),
    ("pm", lambda v: "pm" if v.hour >= 12 else "am"),
)

_Chunk = Union[str, Callable[[datetime], str]]


@lru_cache(maxsize=64)
def _compile_layout(layout: str) -> Tuple[_Chunk, ...]:
    chunks: List[_Chunk] = []
    literal: List[str] = []

    def flush() -> None:
        if literal:
            chunks.append("".join(literal))
            literal.clear()

    i = 0
    while i < len(layout):
        match = _FRACTION.match(layout, i)
        if match:
            flush()
            digits = match.group(1)
            chunks.append(partial(_fraction, layout[i], len(digits), digits[0] == "9"))
            i = match.end()
            continue
        for token, func in _GO_TOKENS:
            if layout.startswith(token, i):
                flush()
                chunks.append(func)
                i += len(token)
                break
        else:
            literal.append(layout[i])
            i += 1
    flush()
    return tuple(chunks)


def format_date(value: datetime, pattern: str) -> str:
    """
    Форматирует дату по шаблону.

    Аргументы:
        value: Дата и время (наивные значения считаются UTC)
        pattern: Раскладка Go или шаблон strftime (если содержит "%")

    Возвращает:
        str: Отформатированная строка
    """
    if not isinstance(value, datetime):
        raise TypeError(f"Ожидался datetime, получено: {type(value).__name__}")
    if "%" in pattern:
        return value.strftime(pattern)
    return "".join(
        chunk if isinstance(chunk, str) else chunk(value)
        for chunk in _compile_layout(pattern)
    )


def format_rfc3339(value: datetime) -> str:
    """Форматирует дату в RFC 3339 без дробной части секунд."""
    return format_date(value, RFC3339)


def parse_date(text: str) -> datetime:
    """
    Разбирает дату в формате YYYY-MM-DD как полночь UTC.

    Raises:
        ValueError: Если строка не соответствует формату
    """
    return datetime.strptime(text.strip(), "%Y-%m-%d").replace(tzinfo=timezone.utc)
