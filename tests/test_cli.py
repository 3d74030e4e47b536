"""Tests for the command-line interface."""

from __future__ import annotations

import pytest
import typer
from typer.testing import CliRunner

from doc_loader import __version__, cli
from doc_loader.document import parse_document
from doc_loader.errors import OperationCancelledError
from doc_loader.models import HttpMethod

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(cli.app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


@pytest.mark.parametrize(
    "value,expected",
    [
        ("Accept: text/html", ("Accept", "text/html")),
        ("X-Empty:", ("X-Empty", "")),
        ("Authorization: Bearer a:b", ("Authorization", "Bearer a:b")),
    ],
)
def test_parse_header(value: str, expected: tuple[str, str]) -> None:
    assert cli.parse_header(value) == expected


def test_parse_header_rejects_missing_colon() -> None:
    with pytest.raises(typer.BadParameter):
        cli.parse_header("Accept text/html")


def test_open_prints_document(monkeypatch) -> None:
    seen = {}

    async def fake_load(config, request):
        seen["config"] = config
        seen["request"] = request
        return parse_document("<title>Landing</title>", "http://example.com/landing")

    monkeypatch.setattr(cli, "_load", fake_load)
    result = runner.invoke(
        cli.app,
        [
            "open",
            "http://example.com/",
            "--follow-refresh",
            "--max-refreshes",
            "4",
            "-X",
            "post",
            "-d",
            "a=1",
            "-H",
            "X-A: 1",
            "-H",
            "X-A: 2",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Landing" in result.output
    assert seen["config"].loader.follow_meta_refresh is True
    assert seen["config"].loader.max_refreshes == 4
    request = seen["request"]
    assert request.method is HttpMethod.POST
    assert request.body == b"a=1"
    assert request.headers == (("X-A", "1"), ("X-A", "2"))


def test_open_reports_cancellation(monkeypatch) -> None:
    async def fake_load(config, request):
        raise OperationCancelledError()

    monkeypatch.setattr(cli, "_load", fake_load)
    result = runner.invoke(cli.app, ["open", "http://example.com/"])
    assert result.exit_code == 130


def test_open_reports_errors(monkeypatch) -> None:
    async def fake_load(config, request):
        raise RuntimeError("no route to host")

    monkeypatch.setattr(cli, "_load", fake_load)
    result = runner.invoke(cli.app, ["open", "http://example.com/"])
    assert result.exit_code == 1
    assert "no route to host" in result.output


def test_open_rejects_unknown_method() -> None:
    result = runner.invoke(cli.app, ["open", "http://example.com/", "-X", "BREW"])
    assert result.exit_code == 1


# ---- config overrides ----
@pytest.mark.parametrize(
    "args",
    [
        ["--max-refreshes", "-1"],
        ["--timeout", "5"],
        ["--timeout", "500000"],
    ],
)
def test_open_rejects_out_of_range_overrides(monkeypatch, args: list[str]) -> None:
    async def fake_load(config, request):
        raise AssertionError("navigation started with an invalid config")

    monkeypatch.setattr(cli, "_load", fake_load)
    result = runner.invoke(cli.app, ["open", "http://example.com/", *args])
    assert result.exit_code != 0


def test_open_rejects_invalid_config_file(tmp_path, monkeypatch) -> None:
    async def fake_load(config, request):
        raise AssertionError("navigation started with an invalid config")

    monkeypatch.setattr(cli, "_load", fake_load)
    path = tmp_path / "loader.toml"
    path.write_text("[loader]\nmax_refreshes = -1\n")
    result = runner.invoke(cli.app, ["open", "http://example.com/", "-c", str(path)])
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_build_config_applies_overrides_over_file_values() -> None:
    from doc_loader.config import AppConfig, LoaderConfig

    base = AppConfig(loader=LoaderConfig(max_refreshes=2, strict_refresh=False))
    config = cli._build_config(base, True, 7, 2000, verbose=False)
    assert config.loader.follow_meta_refresh is True
    assert config.loader.max_refreshes == 7
    assert config.loader.strict_refresh is False
    assert config.fetcher.timeout_ms == 2000


def test_dump_config_prints_effective_toml(monkeypatch) -> None:
    async def fake_load(config, request):
        raise AssertionError("dump-config must not navigate")

    monkeypatch.setattr(cli, "_load", fake_load)
    result = runner.invoke(
        cli.app,
        ["open", "http://example.com/", "--follow-refresh", "--max-refreshes", "3", "--dump-config"],
    )
    assert result.exit_code == 0, result.output
    assert "[loader]" in result.output
    assert "follow_meta_refresh = true" in result.output
    assert "max_refreshes = 3" in result.output
