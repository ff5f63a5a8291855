"""Unit tests for yavs.cli."""

from __future__ import annotations

import pytest

from yavs.cli import parse_args


class TestParseArgs:
    def test_positional_arguments(self) -> None:
        settings = parse_args(["go.example.com", "https://feeds.example.com/vanity.txt"])
        assert settings.domain == "go.example.com"
        assert settings.feed.url == "https://feeds.example.com/vanity.txt"
        assert settings.feed.refresh_path == "/refresh"
        assert settings.feed.refresh_seconds == 0

    def test_flags(self) -> None:
        settings = parse_args(
            [
                "--refresh-interval",
                "10m",
                "--refresh-path",
                "/_reload",
                "--addr",
                "0.0.0.0:9000",
                "--log-format",
                "text",
                "go.example.com",
                "https://feeds.example.com/vanity.txt",
            ]
        )
        assert settings.feed.refresh_seconds == 600
        assert settings.feed.refresh_path == "/_reload"
        assert settings.server.host == "0.0.0.0"
        assert settings.server.port == 9000
        assert settings.logging.format == "text"

    def test_empty_refresh_path_disables_endpoint(self) -> None:
        settings = parse_args(["--refresh-path", "", "d", "https://f.example.com"])
        assert settings.feed.refresh_path == ""

    def test_addr_without_host_listens_on_all_interfaces(self) -> None:
        settings = parse_args(["--addr", ":8081", "d", "https://f.example.com"])
        assert settings.server.host == "0.0.0.0"
        assert settings.server.port == 8081

    def test_addr_ipv6_brackets_stripped(self) -> None:
        settings = parse_args(["--addr", "[::1]:8082", "d", "https://f.example.com"])
        assert settings.server.host == "::1"
        assert settings.server.port == 8082

    def test_addr_default_host_unchanged(self) -> None:
        settings = parse_args(["d", "https://f.example.com"])
        assert settings.server.host == "localhost"

    @pytest.mark.parametrize(
        "argv",
        [
            [],
            ["only-domain"],
            ["d", "u", "extra"],
            ["--addr", "nonsense", "d", "u"],
        ],
    )
    def test_bad_usage_exits_2(self, argv: list[str], capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            parse_args(argv)
        assert exc_info.value.code == 2
        assert "usage: yavs" in capsys.readouterr().err
