"""
Unit tests for configuration and the command line.
"""

import pytest

from fileresponder.__main__ import build_parser, main
from fileresponder.config import ResponderConfig
from fileresponder.http.mime_types import DEFAULT_CONTENT_TYPES
from fileresponder.server import FileServer


ENV_VARS = (
    "HTTP_PROTOCOL", "HTTP_HOST", "HTTP_PORT",
    "HTTP_WEB_ROOT", "HTTP_TIMEOUT", "HTTP_LOG_LEVEL",
)


class TestResponderConfig:
    """Tests for ResponderConfig."""

    def test_defaults(self, tmp_path):
        config = ResponderConfig(web_root=str(tmp_path))
        config.validate()

        assert config.protocol == 4
        assert config.timeout is None
        assert config.send_content_length is False
        assert config.content_types == DEFAULT_CONTENT_TYPES

    def test_catalog_is_copied(self):
        config = ResponderConfig()
        config.content_types[".png"] = "image/png"

        assert ".png" not in DEFAULT_CONTENT_TYPES

    @pytest.mark.parametrize("protocol, expected", [(4, "0.0.0.0"), (6, "::")])
    def test_bind_host(self, protocol, expected):
        assert ResponderConfig(protocol=protocol).bind_host == expected
        assert ResponderConfig(protocol=protocol, host="localhost").bind_host == "localhost"

    @pytest.mark.parametrize("overrides", [
        {"protocol": 5},
        {"port": 70000},
        {"port": -1},
        {"timeout": 0},
        {"buffer_size": 0},
        {"content_types": {"html": "text/html"}},
        {"content_types": {".html": "text/html\r\nX-Evil: 1"}},
        {"default_content_type": "application/☃"},
    ])
    def test_validate_rejects(self, tmp_path, overrides):
        config = ResponderConfig(web_root=str(tmp_path), **overrides)

        with pytest.raises(ValueError):
            config.validate()

    def test_validate_missing_web_root(self, tmp_path):
        config = ResponderConfig(web_root=str(tmp_path / "missing"))

        with pytest.raises(ValueError):
            config.validate()

    def test_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HTTP_PROTOCOL", "6")
        monkeypatch.setenv("HTTP_PORT", "9090")
        monkeypatch.setenv("HTTP_WEB_ROOT", str(tmp_path))
        monkeypatch.setenv("HTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("HTTP_LOG_LEVEL", "DEBUG")
        monkeypatch.delenv("HTTP_HOST", raising=False)

        config = ResponderConfig.from_env()

        assert config.protocol == 6
        assert config.port == 9090
        assert config.web_root == str(tmp_path)
        assert config.timeout == 2.5
        assert config.log_level == "DEBUG"
        assert config.host is None

    def test_from_env_defaults(self, monkeypatch):
        for name in ENV_VARS:
            monkeypatch.delenv(name, raising=False)

        config = ResponderConfig.from_env()

        assert config.port == 8080
        assert config.timeout is None


class TestCommandLine:
    """Tests for the CLI."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ENV_VARS:
            monkeypatch.delenv(name, raising=False)

    @pytest.fixture
    def started(self, monkeypatch):
        """Capture the config main() hands to FileServer.run()."""
        configs = []
        monkeypatch.setattr(FileServer, "run", lambda server: configs.append(server.config))
        return configs

    def test_positional_arguments(self):
        args = build_parser().parse_args(["6", "8000", "www"])

        assert args.protocol == 6
        assert args.port == 8000
        assert args.web_root == "www"
        assert args.content_length is False

    def test_options(self):
        args = build_parser().parse_args(
            ["4", "8000", "www", "--host", "127.0.0.1", "--content-length", "-l", "DEBUG"]
        )

        assert args.host == "127.0.0.1"
        assert args.content_length is True
        assert args.log_level == "DEBUG"

    def test_bad_protocol(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["5", "8000", "www"])

    def test_main_rejects_missing_web_root(self, tmp_path, capsys):
        status = main(["4", "8000", str(tmp_path / "missing")])

        assert status == 2
        assert "Web root" in capsys.readouterr().err

    def test_positionals_are_optional(self):
        args = build_parser().parse_args([])

        assert args.protocol is None
        assert args.port is None
        assert args.web_root is None
        assert args.log_level is None

    def test_main_falls_back_to_environment(self, tmp_path, monkeypatch, started):
        monkeypatch.setenv("HTTP_PROTOCOL", "6")
        monkeypatch.setenv("HTTP_PORT", "3000")
        monkeypatch.setenv("HTTP_WEB_ROOT", str(tmp_path))
        monkeypatch.setenv("HTTP_TIMEOUT", "1.5")
        monkeypatch.setenv("HTTP_LOG_LEVEL", "WARNING")

        assert main([]) == 0

        config, = started
        assert config.protocol == 6
        assert config.port == 3000
        assert config.web_root == str(tmp_path)
        assert config.timeout == 1.5
        assert config.log_level == "WARNING"

    def test_command_line_overrides_environment(self, tmp_path, monkeypatch, started):
        monkeypatch.setenv("HTTP_PORT", "3000")
        monkeypatch.setenv("HTTP_WEB_ROOT", "/does/not/exist")
        monkeypatch.setenv("HTTP_LOG_LEVEL", "WARNING")

        assert main(["4", "9000", str(tmp_path), "-l", "DEBUG"]) == 0

        config, = started
        assert config.port == 9000
        assert config.web_root == str(tmp_path)
        assert config.log_level == "DEBUG"

    def test_defaults_without_environment(self, tmp_path, monkeypatch, started):
        monkeypatch.chdir(tmp_path)

        assert main([]) == 0

        config, = started
        assert config.protocol == 4
        assert config.port == 8080
        assert config.web_root == "."

    def test_bad_environment(self, monkeypatch, capsys):
        monkeypatch.setenv("HTTP_PORT", "eighty")

        assert main([]) == 2
        assert "HTTP_" in capsys.readouterr().err
