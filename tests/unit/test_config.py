"""
Unit tests for ServerConfig.
"""

import pytest

from fileserver.config import ServerConfig


class TestDefaults:

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.root_dir == "."
        assert config.chunk_size == 8192
        assert config.follow_symlinks is True
        assert config.sort_listings is True
        assert config.log_format == "text"

    def test_defaults_validate(self):
        ServerConfig().validate()

    def test_root_path_is_absolute(self, tmp_path):
        config = ServerConfig(root_dir=str(tmp_path))
        assert config.root_path == tmp_path.resolve()


class TestValidate:
    """validate() rejects bad settings with ValueError."""

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 65536},
        {"backlog": 0},
        {"timeout": 0},
        {"timeout": -1.5},
        {"chunk_size": 0},
        {"max_line_length": 10},
        {"max_headers": -1},
        {"min_workers": 0},
        {"min_workers": 8, "max_workers": 4},
        {"queue_size": 0},
        {"log_level": "CHATTY"},
        {"log_format": "xml"},
    ])
    def test_rejects(self, tmp_path, overrides):
        config = ServerConfig(root_dir=str(tmp_path), **overrides)
        with pytest.raises(ValueError):
            config.validate()

    def test_port_zero_allowed(self, tmp_path):
        ServerConfig(root_dir=str(tmp_path), port=0).validate()

    def test_no_timeout_allowed(self, tmp_path):
        ServerConfig(root_dir=str(tmp_path), timeout=None).validate()

    def test_log_level_case_insensitive(self, tmp_path):
        ServerConfig(root_dir=str(tmp_path), log_level="debug").validate()

    def test_missing_root(self, tmp_path):
        config = ServerConfig(root_dir=str(tmp_path / "nope"))
        with pytest.raises(ValueError, match="Root directory"):
            config.validate()

    def test_root_is_file(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(ValueError):
            ServerConfig(root_dir=str(path)).validate()


class TestFromEnv:

    def test_reads_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FILESERVER_HOST", "127.0.0.1")
        monkeypatch.setenv("FILESERVER_PORT", "9000")
        monkeypatch.setenv("FILESERVER_ROOT", str(tmp_path))
        monkeypatch.setenv("FILESERVER_WORKERS", "8")
        monkeypatch.setenv("FILESERVER_TIMEOUT", "2.5")
        monkeypatch.setenv("FILESERVER_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("FILESERVER_LOG_FORMAT", "json")

        config = ServerConfig.from_env()

        assert config.host == "127.0.0.1"
        assert config.port == 9000
        assert config.root_dir == str(tmp_path)
        assert config.max_workers == 8
        assert config.timeout == 2.5
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"
        config.validate()

    def test_defaults_without_environment(self, monkeypatch):
        for name in ("HOST", "PORT", "ROOT", "WORKERS", "TIMEOUT", "LOG_LEVEL", "LOG_FORMAT"):
            monkeypatch.delenv(f"FILESERVER_{name}", raising=False)

        config = ServerConfig.from_env()

        assert config == ServerConfig()

    def test_few_workers_lowers_minimum(self, monkeypatch):
        monkeypatch.setenv("FILESERVER_WORKERS", "2")

        config = ServerConfig.from_env()

        assert config.max_workers == 2
        assert config.min_workers == 2

    def test_bad_number(self, monkeypatch):
        monkeypatch.setenv("FILESERVER_PORT", "eighty")
        with pytest.raises(ValueError):
            ServerConfig.from_env()
