"""
Тесты для главного модуля приложения.
Команды fetch и init выполняются целиком, сеть заменена httpx.MockTransport.
"""
import httpx
import pytest

from linkding_markdown.config import Config
from linkding_markdown.errors import APIError, ConfigurationError, TemplateCompileError
from linkding_markdown.main import apply_overrides, main, parse_arguments, run_fetch
from tests.conftest import MockLinkdingServer


@pytest.fixture
def env_file(temp_dir):
    """.env с параметрами подключения, без ограничения по дате"""
    path = temp_dir / ".env"
    path.write_text(
        "LINKDING_URL=https://links.example.com\n"
        "LINKDING_TOKEN=secret-token\n"
        "FETCH_DAYS=0\n",
        encoding="utf-8",
    )
    return str(path)


def test_parse_arguments_fetch():
    """Тест разбора аргументов команды fetch"""
    args = parse_arguments([
        "--config", "custom.env", "-v", "fetch",
        "--days", "14", "--query", "python", "-o", "out.md",
        "--no-tags", "--date-format", "Jan 2, 2006",
    ])

    assert args.command == "fetch"
    assert args.config_path == "custom.env"
    assert args.verbose is True
    assert args.days == 14
    assert args.query == "python"
    assert args.output == "out.md"
    assert args.no_tags is True
    assert args.no_notes is False
    assert args.date_format == "Jan 2, 2006"
    assert args.url is None


def test_parse_arguments_requires_command():
    with pytest.raises(SystemExit):
        parse_arguments([])


def test_apply_overrides():
    """Аргументы командной строки имеют приоритет над .env"""
    config = Config(linkding_url="https://env.example.com", fetch_days=7)
    args = parse_arguments([
        "fetch", "--url", "https://cli.example.com", "--days", "0",
        "--no-group-by-date", "--title", "CLI title",
    ])

    apply_overrides(config, args)

    assert config.linkding_url == "https://cli.example.com"
    assert config.fetch_days == 0
    assert config.group_by_date is False
    assert config.document_title == "CLI title"
    assert config.include_notes is True


def test_run_fetch_writes_document(env_file, temp_dir):
    """Полный цикл: загрузка трех страниц и запись документа в файл"""
    server = MockLinkdingServer(total=250)
    output_path = temp_dir / "bookmarks.md"
    args = parse_arguments([
        "--config", env_file, "fetch", "--output", str(output_path), "--title", "All links",
    ])

    written = run_fetch(args, transport=server.transport)

    content = output_path.read_text(encoding="utf-8")
    assert written == len(content.encode("utf-8"))
    assert content.startswith("# All links\n")
    assert "[Bookmark 250](https://example.com/250)" in content
    assert server.offsets == [0, 100, 200]
    assert "added_since" not in server.requests[0].url.params


def test_run_fetch_sends_date_range(env_file, temp_dir):
    server = MockLinkdingServer(total=1)
    args = parse_arguments([
        "--config", env_file, "fetch", "--since", "2025-01-01", "--until", "2025-01-31",
        "--query", "golang", "-o", str(temp_dir / "out.md"),
    ])

    run_fetch(args, transport=server.transport)

    params = server.requests[0].url.params
    assert params["added_since"] == "2025-01-01T00:00:00Z"
    assert params["modified_since"] == "2025-01-31T00:00:00Z"
    assert params["q"] == "golang"


def test_run_fetch_empty_result_still_renders(env_file, temp_dir):
    """Пустой результат - документ все равно создается"""
    output_path = temp_dir / "empty.md"
    args = parse_arguments(["--config", env_file, "fetch", "-o", str(output_path)])

    run_fetch(args, transport=MockLinkdingServer(total=0).transport)

    assert "No bookmarks found." in output_path.read_text(encoding="utf-8")


def test_run_fetch_custom_template(env_file, temp_dir):
    template_path = temp_dir / "template.md"
    template_path.write_text(
        "{% for b in Bookmarks %}{{ b.id }};{% endfor %}", encoding="utf-8"
    )
    output_path = temp_dir / "out.md"
    args = parse_arguments([
        "--config", env_file, "fetch", "--template", str(template_path), "-o", str(output_path),
    ])

    run_fetch(args, transport=MockLinkdingServer(total=3).transport)

    assert output_path.read_text(encoding="utf-8") == "1;2;3;"


def test_run_fetch_bad_template_fails_before_network(env_file, temp_dir):
    """Некорректный шаблон обнаруживается до первого запроса"""
    template_path = temp_dir / "broken.md"
    template_path.write_text("{% for b in Bookmarks %}", encoding="utf-8")
    server = MockLinkdingServer(total=3)
    args = parse_arguments(["--config", env_file, "fetch", "--template", str(template_path)])

    with pytest.raises(TemplateCompileError):
        run_fetch(args, transport=server.transport)

    assert server.requests == []


def test_run_fetch_api_error_leaves_no_output(env_file, temp_dir):
    """Ошибка API прерывает работу, файл результата не создается"""
    output_path = temp_dir / "out.md"
    server = MockLinkdingServer(
        responder=lambda request, index: httpx.Response(401, json={"detail": "Invalid token."})
    )
    args = parse_arguments(["--config", env_file, "fetch", "-o", str(output_path)])

    with pytest.raises(APIError) as exc_info:
        run_fetch(args, transport=server.transport)

    assert exc_info.value.status_code == 401
    assert not output_path.exists()


def test_run_fetch_missing_token(temp_dir):
    """Без токена загрузка не начинается"""
    env_path = temp_dir / ".env"
    env_path.write_text("LINKDING_URL=https://links.example.com\n", encoding="utf-8")
    server = MockLinkdingServer(total=1)
    args = parse_arguments(["--config", str(env_path), "fetch"])

    with pytest.raises(ConfigurationError, match="LINKDING_TOKEN"):
        run_fetch(args, transport=server.transport)

    assert server.requests == []


def test_main_exits_with_error_code(temp_dir):
    """Ошибка приложения - код выхода 1"""
    env_path = temp_dir / ".env"
    env_path.write_text("FETCH_DAYS=0\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        main(["--config", str(env_path), "fetch"])

    assert exc_info.value.code == 1


def test_main_missing_config_file(temp_dir):
    with pytest.raises(SystemExit) as exc_info:
        main(["--config", str(temp_dir / "missing.env"), "fetch"])

    assert exc_info.value.code == 1


def test_main_interrupted(env_file, monkeypatch):
    """Прерывание пользователем - код выхода 130"""

    def interrupt(args, transport=None):
        raise KeyboardInterrupt

    monkeypatch.setattr("linkding_markdown.main.run_fetch", interrupt)

    with pytest.raises(SystemExit) as exc_info:
        main(["--config", env_file, "fetch"])

    assert exc_info.value.code == 130


def test_main_init(temp_dir, monkeypatch, capsys):
    """Команда init создает файлы в текущем каталоге"""
    monkeypatch.chdir(temp_dir)

    main(["init"])

    assert (temp_dir / ".env").exists()
    assert (temp_dir / "linkding-to-markdown.md").exists()
    assert "Дальнейшие шаги" in capsys.readouterr().err

    with pytest.raises(SystemExit) as exc_info:
        main(["init"])
    assert exc_info.value.code == 1


def test_cli_flag_replaces_invalid_env_value(temp_dir):
    """Некорректное значение из .env не мешает, если его переопределяет аргумент"""
    env_path = temp_dir / ".env"
    env_path.write_text(
        "LINKDING_URL=https://links.example.com\n"
        "LINKDING_TOKEN=secret-token\n"
        "FETCH_SINCE=bogus\n",
        encoding="utf-8",
    )
    server = MockLinkdingServer(total=1)
    args = parse_arguments([
        "--config", str(env_path), "fetch", "--since", "2025-01-01", "-o", str(temp_dir / "out.md"),
    ])

    run_fetch(args, transport=server.transport)

    assert server.requests[0].url.params["added_since"] == "2025-01-01T00:00:00Z"


def test_invalid_env_value_without_override(temp_dir):
    """Без переопределения некорректное значение из .env по-прежнему ошибка"""
    env_path = temp_dir / ".env"
    env_path.write_text(
        "LINKDING_URL=https://links.example.com\n"
        "LINKDING_TOKEN=secret-token\n"
        "FETCH_SINCE=bogus\n",
        encoding="utf-8",
    )
    server = MockLinkdingServer(total=1)
    args = parse_arguments(["--config", str(env_path), "fetch"])

    with pytest.raises(ConfigurationError, match="FETCH_SINCE"):
        run_fetch(args, transport=server.transport)

    assert server.requests == []


def test_main_init_permission_error(temp_dir, monkeypatch):
    """Ошибка файловой системы при init - код выхода 1, а не трассировка"""

    def deny(*args, **kwargs):
        raise PermissionError(13, "Permission denied", str(temp_dir / ".env"))

    monkeypatch.setattr("linkding_markdown.main.init_project", deny)

    with pytest.raises(SystemExit) as exc_info:
        main(["init"])

    assert exc_info.value.code == 1
