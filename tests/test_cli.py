from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from click.testing import CliRunner
from pytest import MonkeyPatch

from compattable import __version__, cli
from compattable.exceptions import CompatError, HttpStatusError


def _payload(title: str = "Flexbox") -> list[dict[str, Any]]:
    return [
        {
            "title": title,
            "support": {"chrome": {"version_added": "29 #1"}, "firefox": False},
            "notes_by_num": {"1": "Prefixed before 29."},
        }
    ]


def _fake_payloads(
    payloads: dict[str, Any],
) -> Any:
    def _fetch(feature_ids: list[str], *, workers: int) -> list[tuple[str, Any]]:
        _ = workers
        return [(feature_id, payloads[feature_id]) for feature_id in feature_ids]

    return _fetch


def test_help() -> None:
    runner = CliRunner()
    result = runner.invoke(cli.main, ["--help"])
    assert result.exit_code == 0
    assert "Usage:" in result.output
    assert "--browser" in result.output


def test_version() -> None:
    runner = CliRunner()
    result = runner.invoke(cli.main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_missing_query_is_usage_error() -> None:
    runner = CliRunner()
    result = runner.invoke(cli.main, [])
    assert result.exit_code == 2


def test_no_matches_exit_nonzero(monkeypatch: MonkeyPatch) -> None:
    runner = CliRunner()
    monkeypatch.setattr(cli, "fetch_search_feature_ids", lambda query: [])

    result = runner.invoke(cli.main, ["nothing"])

    assert result.exit_code != 0
    assert "No feature IDs found for 'nothing'" in result.output


def test_renders_each_feature(monkeypatch: MonkeyPatch) -> None:
    runner = CliRunner()
    seen: dict[str, object] = {}

    def _search(query: str) -> list[str]:
        seen["query"] = query
        return ["flexbox", "css-grid"]

    monkeypatch.setattr(cli, "fetch_search_feature_ids", _search)
    monkeypatch.setattr(
        cli,
        "fetch_feature_payloads",
        _fake_payloads(
            {
                "flexbox": _payload(),
                "css-grid": [{"title": "Grid", "spec": "https://example.com/grid"}],
            }
        ),
    )

    result = runner.invoke(cli.main, ["css", "layout"])

    assert result.exit_code == 0, result.output
    assert seen["query"] == "css layout"
    assert "Selected feature IDs:" in result.output
    assert "Flexbox" in result.output
    assert "29 #1 (see notes)" in result.output
    assert "#1: Prefixed before 29." in result.output
    assert "Grid" in result.output
    assert "No compatibility data available." in result.output


def test_browser_filter(monkeypatch: MonkeyPatch) -> None:
    runner = CliRunner()
    monkeypatch.setattr(cli, "fetch_search_feature_ids", lambda query: ["flexbox"])
    monkeypatch.setattr(cli, "fetch_feature_payloads", _fake_payloads({"flexbox": _payload()}))

    result = runner.invoke(cli.main, ["flexbox", "-b", "firefox"])

    assert result.exit_code == 0, result.output
    assert "firefox" in result.output
    assert "chrome" not in result.output


def test_workers_option_is_passed(monkeypatch: MonkeyPatch) -> None:
    runner = CliRunner()
    seen: dict[str, int] = {}

    def _fetch(feature_ids: list[str], *, workers: int) -> list[tuple[str, Any]]:
        seen["workers"] = workers
        return [(feature_id, _payload()) for feature_id in feature_ids]

    monkeypatch.setattr(cli, "fetch_search_feature_ids", lambda query: ["flexbox"])
    monkeypatch.setattr(cli, "fetch_feature_payloads", _fetch)

    result = runner.invoke(cli.main, ["flexbox", "-j", "8"])
    assert result.exit_code == 0, result.output
    assert seen["workers"] == 8

    result = runner.invoke(cli.main, ["flexbox", "-j", "0"])
    assert result.exit_code == 2


def test_failed_feature_is_reported_and_others_still_render(monkeypatch: MonkeyPatch) -> None:
    runner = CliRunner()
    monkeypatch.setattr(cli, "fetch_search_feature_ids", lambda query: ["flexbox", "gone", "odd"])
    monkeypatch.setattr(
        cli,
        "fetch_feature_payloads",
        _fake_payloads(
            {
                "flexbox": _payload(),
                "gone": HttpStatusError(404, "https://caniuse.com/gone"),
                "odd": [{"support": {"chrome": [1, 2]}}],
            }
        ),
    )

    result = runner.invoke(cli.main, ["flex"])

    assert result.exit_code == 1
    assert "Flexbox" in result.output
    assert "HTTP 404" in result.output
    assert "Unable to decode feature data for odd" in result.output
    assert "2 of 3 feature(s) could not be loaded." in result.output


def test_cli_wraps_fetches_in_shared_client_context(monkeypatch: MonkeyPatch) -> None:
    runner = CliRunner()
    state = {"entered": 0, "exited": 0, "active": False, "search": False, "features": False}

    @contextmanager
    def _fake_shared_client(timeout: float = 10.0) -> Iterator[object]:
        state["timeout"] = timeout
        state["entered"] += 1
        state["active"] = True
        try:
            yield object()
        finally:
            state["active"] = False
            state["exited"] += 1

    def _search(_query: str) -> list[str]:
        state["search"] = state["active"]
        return ["flexbox"]

    def _fetch(feature_ids: list[str], *, workers: int) -> list[tuple[str, Any]]:
        _ = workers
        state["features"] = state["active"]
        return [(feature_id, _payload()) for feature_id in feature_ids]

    monkeypatch.setattr(cli, "use_shared_client", _fake_shared_client)
    monkeypatch.setattr(cli, "fetch_search_feature_ids", _search)
    monkeypatch.setattr(cli, "fetch_feature_payloads", _fetch)

    result = runner.invoke(cli.main, ["flexbox", "--timeout", "3.5"])

    assert result.exit_code == 0, result.output
    assert state["entered"] == 1
    assert state["exited"] == 1
    assert state["search"] is True
    assert state["features"] is True
    assert state["timeout"] == 3.5


def test_cli_error_path_still_exits_shared_client_context(monkeypatch: MonkeyPatch) -> None:
    runner = CliRunner()
    state = {"entered": 0, "exited": 0}

    @contextmanager
    def _fake_shared_client(timeout: float = 10.0) -> Iterator[object]:
        _ = timeout
        state["entered"] += 1
        try:
            yield object()
        finally:
            state["exited"] += 1

    class _BoomError(CompatError):
        pass

    monkeypatch.setattr(cli, "use_shared_client", _fake_shared_client)
    monkeypatch.setattr(
        cli,
        "fetch_search_feature_ids",
        lambda _query: (_ for _ in ()).throw(_BoomError("boom")),
    )

    result = runner.invoke(cli.main, ["flexbox"])
    assert result.exit_code != 0
    assert "Error: boom" in result.output
    assert state["entered"] == 1
    assert state["exited"] == 1


def test_debug_env_flag(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("COMPATTABLE_DEBUG", "1")
    assert cli.debug_enabled() is True
    monkeypatch.setenv("COMPATTABLE_DEBUG", "0")
    assert cli.debug_enabled() is False


def test_browser_filter_without_matches_keeps_data_placeholder_apart(
    monkeypatch: MonkeyPatch,
) -> None:
    runner = CliRunner()
    monkeypatch.setattr(cli, "fetch_search_feature_ids", lambda query: ["flexbox"])
    monkeypatch.setattr(cli, "fetch_feature_payloads", _fake_payloads({"flexbox": _payload()}))

    result = runner.invoke(cli.main, ["flexbox", "-b", "safari"])

    assert result.exit_code == 0, result.output
    assert "No data for the selected browsers." in result.output
    assert "No compatibility data available." not in result.output
