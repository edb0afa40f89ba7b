"""Tests for EnvReader."""

from pathlib import Path

from anivault.config.env import EnvReader


class TestGetStr:
    """Tests for EnvReader.get_str."""

    def test_returns_value(self) -> None:
        reader = EnvReader(env={"ANIVAULT_SUBTITLE_LANGUAGE": "eng"})
        assert reader.get_str("ANIVAULT_SUBTITLE_LANGUAGE") == "eng"

    def test_strips_whitespace(self) -> None:
        reader = EnvReader(env={"VAR": "  value  "})
        assert reader.get_str("VAR") == "value"

    def test_missing_returns_default(self) -> None:
        reader = EnvReader(env={})
        assert reader.get_str("VAR", "fallback") == "fallback"

    def test_empty_counts_as_unset(self) -> None:
        """Blank values should not override lower-precedence sources."""
        reader = EnvReader(env={"VAR": "   "})
        assert reader.get_str("VAR") is None


class TestTypedGetters:
    """Tests for int, float, bool and path conversion."""

    def test_get_int(self) -> None:
        reader = EnvReader(env={"ANIVAULT_MAX_CONCURRENT": "3"})
        assert reader.get_int("ANIVAULT_MAX_CONCURRENT", 2) == 3

    def test_get_int_invalid_returns_default(self, caplog) -> None:
        reader = EnvReader(env={"ANIVAULT_MAX_CONCURRENT": "three"})
        assert reader.get_int("ANIVAULT_MAX_CONCURRENT", 2) == 2
        assert "Invalid integer value" in caplog.text

    def test_get_float(self) -> None:
        reader = EnvReader(env={"ANIVAULT_SETTLE_SECONDS": "12.5"})
        assert reader.get_float("ANIVAULT_SETTLE_SECONDS") == 12.5

    def test_get_float_invalid_returns_default(self) -> None:
        reader = EnvReader(env={"ANIVAULT_SETTLE_SECONDS": "soon"})
        assert reader.get_float("ANIVAULT_SETTLE_SECONDS", 300.0) == 300.0

    def test_get_bool(self) -> None:
        reader = EnvReader(env={"A": "yes", "B": "TRUE", "C": "off"})
        assert reader.get_bool("A") is True
        assert reader.get_bool("B") is True
        assert reader.get_bool("C") is False
        assert reader.get_bool("D") is None

    def test_get_path_expands_user(self) -> None:
        reader = EnvReader(env={"DownloadingFolderPath": "~/downloads"})
        path = reader.get_path("DownloadingFolderPath")
        assert path == Path.home() / "downloads"

    def test_uses_os_environ_by_default(self, monkeypatch) -> None:
        monkeypatch.setenv("ANIVAULT_TEST_VALUE", "42")
        assert EnvReader().get_int("ANIVAULT_TEST_VALUE") == 42
