"""Tests for the command-line entrypoint."""

from __future__ import annotations

import io
import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from conftest import FakeFetcher, FakeSource, make_record

from torrentscout.domain.entities import (
    ApplicationError,
    Category,
    ConnectionEstablished,
    ConnectionFailed,
    Err,
    InvalidApiKey,
    MagnetUri,
    Ok,
    SourceDescriptor,
    TorrentRecord,
    TorznabConfig,
    UnexpectedError,
    UnexpectedResponse,
    Unsafe,
)
from torrentscout.domain.sources import SourceError
from torrentscout.infrastructure.config import AppConfig
from torrentscout.infrastructure.sources import SourceRegistry
from torrentscout.interfaces.cli import cli
from torrentscout.interfaces.cli.cli import (
    EXIT_ERROR,
    EXIT_OK,
    _parse_args,
    describe_connection,
    describe_outcome,
    record_to_dict,
    run_check_indexer,
    run_search,
    run_sources,
    start,
)

_CAPS_URL = "https://jackett.local/torznab/api?t=caps"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.upper().startswith("TORRENTSCOUT_"):
            monkeypatch.delenv(key, raising=False)


def _descriptor(name: str = "Nyaa") -> SourceDescriptor:
    return SourceDescriptor(id=name.lower(), name=name, url="https://nyaa.si")


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


class TestParseArgs:
    def test_search_defaults(self) -> None:
        args = _parse_args(["search", "big buck bunny"])
        assert args.command == "search"
        assert args.query == "big buck bunny"
        assert args.category == "all"
        assert args.sources is None
        assert args.max_results is None
        assert args.json is False

    def test_search_options(self) -> None:
        args = _parse_args(
            [
                "--log-level",
                "DEBUG",
                "search",
                "show",
                "--category",
                "anime",
                "--source",
                "nyaasi",
                "--source",
                "animetosho",
                "--max-results",
                "20",
                "--json",
            ]
        )
        assert args.log_level == "DEBUG"
        assert args.category == "anime"
        assert args.sources == ["nyaasi", "animetosho"]
        assert args.max_results == 20
        assert args.json is True

    def test_check_indexer(self) -> None:
        args = _parse_args(["check-indexer", "--url", "https://x.local", "--api-key", "k"])
        assert args.indexer_id is None
        assert (args.url, args.api_key) == ("https://x.local", "k")

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            _parse_args([])

    def test_unknown_category(self) -> None:
        with pytest.raises(SystemExit):
            _parse_args(["search", "x", "--category", "cartoons"])


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRendering:
    def test_describe_ok(self) -> None:
        outcome = Ok(_descriptor(), [make_record(), make_record()])
        assert describe_outcome(outcome) == "[ok] Nyaa: 2 results"

    def test_describe_err(self) -> None:
        outcome = Err(_descriptor("Eztv"), SourceError("Eztv: HTTP 503"))
        assert describe_outcome(outcome) == "[failed] Eztv: Eztv: HTTP 503"

    @pytest.mark.parametrize(
        ("result", "text"),
        [
            (ConnectionEstablished(), "Connection established"),
            (ConnectionFailed(), "Could not connect to the indexer"),
            (InvalidApiKey(), "Invalid API key"),
            (ApplicationError(201), "Indexer reported application error 201"),
            (UnexpectedResponse(None), "Unexpected response from the indexer"),
            (UnexpectedResponse(900), "Unexpected response from the indexer (code 900)"),
            (UnexpectedError("HTTP 502"), "Unexpected error: HTTP 502"),
            (UnexpectedError(), "Unexpected error"),
        ],
    )
    def test_describe_connection(self, result: object, text: str) -> None:
        assert describe_connection(result) == text  # type: ignore[arg-type]

    def test_record_to_dict_info_hash(self) -> None:
        data = record_to_dict(make_record(info_hash="f" * 40))
        assert data["info_hash"] == "f" * 40
        assert data["magnet_uri"].startswith("magnet:?xt=urn:btih:" + "f" * 40)
        assert data["category"] == "apps"
        assert data["source_id"] == "fake"

    def test_record_to_dict_magnet(self, magnet_record: TorrentRecord) -> None:
        data = record_to_dict(magnet_record)
        assert isinstance(magnet_record.identifier, MagnetUri)
        assert data["magnet_uri"] == magnet_record.identifier.uri
        assert data["info_hash"] == "b" * 40
        assert data["description_page_url"] is None


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class TestRunSources:
    def test_lists_descriptors(self) -> None:
        registry = SourceRegistry(
            builtins=[FakeSource("beta", enabled_by_default=False), FakeSource("alpha")],
            torznab_configs=[
                TorznabConfig(
                    id="idx",
                    name="Indexer",
                    url="https://jackett.local/torznab/",
                    api_key="k",
                    unsafe_reason="public",
                )
            ],
        )
        out = io.StringIO()

        assert run_sources(registry, out) == EXIT_OK

        lines = out.getvalue().splitlines()
        assert [line.split()[0] for line in lines] == ["alpha", "beta", "idx"]
        assert lines[0].endswith("(default)")
        assert "torznab" in lines[2]
        assert lines[2].endswith("(unsafe: public)")


class TestRunSearch:
    @pytest.mark.asyncio
    async def test_table_output(self) -> None:
        registry = SourceRegistry(
            builtins=[
                FakeSource(
                    "alpha",
                    records=[
                        make_record("Low", source_id="alpha", seeders=1),
                        make_record("High", source_id="alpha", seeders=99),
                    ],
                ),
                FakeSource("beta", error=SourceError("down")),
            ]
        )
        args = _parse_args(["search", "ubuntu"])
        out = io.StringIO()

        code = await run_search(args, AppConfig(), registry, FakeFetcher(), out)

        text = out.getvalue()
        assert code == EXIT_OK
        assert "[ok] Alpha: 2 results" in text
        assert "[failed] Beta: Beta: down" in text
        assert "2 results for 'ubuntu'" in text
        assert text.index("High") < text.index("Low")

    @pytest.mark.asyncio
    async def test_json_output_and_source_selection(self) -> None:
        alpha = FakeSource("alpha", records=[make_record(source_id="alpha")])
        beta = FakeSource("beta", records=[make_record(source_id="beta")])
        registry = SourceRegistry(builtins=[alpha, beta])
        args = _parse_args(["search", "ubuntu", "--source", "beta", "--json"])
        out = io.StringIO()

        await run_search(args, AppConfig(), registry, FakeFetcher(), out)

        data = json.loads(out.getvalue())
        assert [item["source_id"] for item in data] == ["beta"]
        assert alpha.calls == []

    @pytest.mark.asyncio
    async def test_config_enabled_sources_and_limit(self) -> None:
        alpha = FakeSource(
            "alpha",
            category=Category.ANIME,
            records=[make_record(str(i), source_id="alpha") for i in range(5)],
        )
        beta = FakeSource("beta")
        registry = SourceRegistry(builtins=[alpha, beta])
        config = AppConfig(enabled_sources=["alpha", "missing"], max_results=2)
        args = _parse_args(["search", "show", "--category", "anime", "--json"])
        out = io.StringIO()

        await run_search(args, config, registry, FakeFetcher(), out)

        assert len(json.loads(out.getvalue())) == 2
        assert alpha.calls == [("show", Category.ANIME)]
        assert beta.calls == []


class TestRunCheckIndexer:
    def _registry(self) -> SourceRegistry:
        return SourceRegistry(
            builtins=[FakeSource("plain")],
            torznab_configs=[
                TorznabConfig(
                    id="jackett",
                    name="Jackett",
                    url="https://jackett.local/torznab/",
                    api_key="k",
                )
            ],
        )

    @pytest.mark.asyncio
    async def test_configured_indexer(self) -> None:
        fetch = FakeFetcher(responses={_CAPS_URL: (200, "<caps><categories/></caps>")})
        out = io.StringIO()
        args = _parse_args(["check-indexer", "jackett"])

        assert await run_check_indexer(args, self._registry(), fetch, out) == EXIT_OK
        assert out.getvalue() == "Connection established\n"

    @pytest.mark.asyncio
    async def test_ad_hoc_url_failure(self) -> None:
        fetch = FakeFetcher(responses={_CAPS_URL: (401, "")})
        out = io.StringIO()
        args = _parse_args(
            ["check-indexer", "--url", "https://jackett.local/torznab/", "--api-key", "bad"]
        )

        assert await run_check_indexer(args, self._registry(), fetch, out) == EXIT_ERROR
        assert out.getvalue() == "Invalid API key\n"
        assert fetch.urls == [f"{_CAPS_URL}&apikey=bad"]

    @pytest.mark.asyncio
    async def test_builtin_source_rejected(self) -> None:
        args = _parse_args(["check-indexer", "plain"])
        with pytest.raises(SourceError):
            await run_check_indexer(args, self._registry(), FakeFetcher(), io.StringIO())

    @pytest.mark.asyncio
    async def test_missing_target(self) -> None:
        args = _parse_args(["check-indexer"])
        with pytest.raises(SourceError):
            await run_check_indexer(args, self._registry(), FakeFetcher(), io.StringIO())


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


class TestStart:
    def test_missing_config_file(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = start(["--config", str(tmp_path / "absent.yaml"), "sources"])
        assert code == EXIT_ERROR
        assert "invalid configuration" in capsys.readouterr().err

    def test_invalid_config_value(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("search:\n  max_results: 0\n", encoding="utf-8")
        assert start(["--config", str(path), "sources"]) == EXIT_ERROR
        assert "max_results" in capsys.readouterr().err

    @patch.object(cli, "stop_logging")
    @patch.object(cli, "configure_logging")
    def test_sources_command(
        self,
        mock_configure,
        mock_stop,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert start(["--log-format", "json", "sources"]) == EXIT_OK

        config = mock_configure.call_args[0][0]
        assert config.log_format == "json"
        mock_stop.assert_called_once()
        out = capsys.readouterr().out
        assert "nyaasi" in out
        assert "thepiratebay" in out

    @patch.object(cli, "stop_logging")
    @patch.object(cli, "configure_logging")
    def test_source_error_exit_code(
        self,
        mock_configure,
        mock_stop,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert start(["check-indexer", "nyaasi"]) == EXIT_ERROR
        assert "not a Torznab indexer" in capsys.readouterr().err
        mock_stop.assert_called_once()
