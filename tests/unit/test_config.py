"""Unit tests — Settings loading and overrides."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from window_bridge.config import Settings, get_settings, override_settings
from window_bridge.exceptions import ConfigError


@pytest.mark.unit
class TestSettingsDefaults:
    def test_layout_defaults(self) -> None:
        s = Settings()
        assert s.layout.menu_bar_inset == 23
        assert s.layout.cascade_origin == 50
        assert s.layout.cascade_step == 30
        assert s.layout.cascade_scale == 0.6
        assert s.layout.center_scale == 0.8

    def test_detection_defaults(self) -> None:
        s = Settings()
        assert s.detection.maximized_width_ratio == 0.95
        assert s.detection.maximized_height_ratio == 0.90
        assert (s.detection.reference_width, s.detection.reference_height) == (1920, 1080)
        assert 1920 * s.detection.restore_width_ratio == pytest.approx(1900)
        assert 1080 * s.detection.restore_height_ratio == pytest.approx(1000)

    def test_bridge_defaults(self) -> None:
        s = Settings()
        assert s.bridge.osascript_path == "osascript"
        assert s.bridge.timeout_seconds == 10.0
        assert s.bridge.host_app_names == []

    def test_resources_disabled_by_default(self) -> None:
        assert Settings().resources.enabled is False

    def test_resource_sampling_defaults(self) -> None:
        s = Settings()
        assert s.resources.sample_interval == 0.2
        assert s.resources.top_processes == 5

    def test_negative_sample_interval_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(resources={"sample_interval": -1})

    def test_invalid_timeout_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(bridge={"timeout_seconds": 0})


@pytest.mark.unit
class TestSettingsLoad:
    def test_load_from_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("layout:\n  menu_bar_inset: 30\nbridge:\n  host_app_names: [Electron]\n")
        s = Settings.load(config)
        assert s.layout.menu_bar_inset == 30
        assert s.bridge.host_app_names == ["Electron"]

    def test_missing_explicit_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            Settings.load(tmp_path / "missing.yaml")

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("layout: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            Settings.load(config)

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            Settings.load(config)

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("")
        assert Settings.load(config).layout.menu_bar_inset == 23

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WINDOW_BRIDGE_LAYOUT__MENU_BAR_INSET", "40")
        assert Settings().layout.menu_bar_inset == 40


@pytest.mark.unit
class TestSingleton:
    def test_override_settings(self) -> None:
        custom = Settings(layout={"menu_bar_inset": 0})
        override_settings(custom)
        assert get_settings() is custom
