"""Tests for SandboxConfig."""

import pytest

from scriptbox.config import SandboxConfig


class TestDefaults:
    def test_defaults(self):
        config = SandboxConfig()
        assert config.default_deadline == 5.0
        assert config.max_deadline == 30.0
        assert config.max_source_bytes == 64 * 1024
        assert config.max_output_bytes == 1024 * 1024
        assert config.start_method is None


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"default_deadline": 0},
            {"default_deadline": 10, "max_deadline": 5},
            {"max_source_bytes": 0},
            {"max_output_bytes": 0},
            {"max_workers": 0},
            {"admission_timeout": -1},
            {"startup_timeout": 0},
            {"memory_limit_mb": 0},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            SandboxConfig(**kwargs)

    def test_invalid_start_method(self):
        with pytest.raises(ValueError, match="start_method"):
            SandboxConfig(start_method="thread")

    def test_optional_caps_accept_none(self):
        config = SandboxConfig(max_output_bytes=None, admission_timeout=None, memory_limit_mb=None)
        assert config.max_output_bytes is None


class TestResolveDeadline:
    def test_default(self):
        assert SandboxConfig().resolve_deadline(None) == 5.0

    def test_within_bounds(self):
        assert SandboxConfig().resolve_deadline(2) == 2.0

    def test_clamped(self):
        assert SandboxConfig(max_deadline=10).resolve_deadline(60) == 10.0


class TestFromEnv:
    def test_reads_prefixed_variables(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SCRIPTBOX_DEFAULT_DEADLINE", "2.5")
        monkeypatch.setenv("SCRIPTBOX_MAX_WORKERS", "8")
        monkeypatch.setenv("SCRIPTBOX_MAX_OUTPUT_BYTES", "none")
        monkeypatch.setenv("SCRIPTBOX_VERBOSE", "true")
        monkeypatch.setenv("SCRIPTBOX_START_METHOD", "spawn")
        config = SandboxConfig.from_env()
        assert config.default_deadline == 2.5
        assert config.max_workers == 8
        assert config.max_output_bytes is None
        assert config.verbose is True
        assert config.start_method == "spawn"

    def test_overrides_win(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SCRIPTBOX_MAX_WORKERS", "8")
        assert SandboxConfig.from_env(max_workers=2).max_workers == 2

    def test_dotenv_file(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("SCRIPTBOX_MAX_DEADLINE", raising=False)
        (tmp_path / ".env").write_text("SCRIPTBOX_MAX_DEADLINE=12\n")
        try:
            assert SandboxConfig.from_env().max_deadline == 12.0
        finally:
            monkeypatch.delenv("SCRIPTBOX_MAX_DEADLINE", raising=False)

    def test_invalid_number(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SCRIPTBOX_MAX_WORKERS", "many")
        with pytest.raises(ValueError):
            SandboxConfig.from_env()
