"""Window Bridge — Configuration.

Configuration is loaded from (in order of increasing priority):
    1. Built-in defaults (this file)
    2. System config: /etc/window-bridge/config.yaml
    3. User config:   ~/.window-bridge/config.yaml
    4. An explicit ``--config`` file
    5. Environment variables prefixed with WINDOW_BRIDGE_

Call ``Settings.load()`` once at startup and pass the instance to
``build_manager``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from window_bridge.exceptions import ConfigError
from window_bridge.protocol.constants import (
    CASCADE_ORIGIN,
    CASCADE_SCALE,
    CASCADE_STEP,
    CENTER_SCALE,
    FALLBACK_DISPLAY_HEIGHT,
    FALLBACK_DISPLAY_ID,
    FALLBACK_DISPLAY_WIDTH,
    MAXIMIZED_HEIGHT_RATIO,
    MAXIMIZED_WIDTH_RATIO,
    MENU_BAR_INSET,
    REFERENCE_HEIGHT,
    REFERENCE_WIDTH,
    RESTORE_HEIGHT,
    RESTORE_HEIGHT_RATIO,
    RESTORE_ORIGIN,
    RESTORE_WIDTH,
    RESTORE_WIDTH_RATIO,
)


# ---------------------------------------------------------------------------
# Sub-configuration blocks
# ---------------------------------------------------------------------------


class BridgeConfig(BaseModel):
    osascript_path: str = Field(
        default="osascript",
        description="Executable used to run JavaScript for Automation scripts.",
    )
    timeout_seconds: Annotated[float, Field(gt=0, le=120)] = Field(
        default=10.0,
        description="Per-call timeout. The script process is killed when it expires.",
    )
    host_app_names: list[str] = Field(
        default_factory=list,
        description=(
            "Process names of the UI hosting this bridge. When one of them is "
            "frontmost, the active app falls back to the last real app."
        ),
    )


class LayoutConfig(BaseModel):
    menu_bar_inset: Annotated[int, Field(ge=0, le=200)] = MENU_BAR_INSET
    cascade_origin: Annotated[int, Field(ge=0)] = CASCADE_ORIGIN
    cascade_step: Annotated[int, Field(ge=0)] = CASCADE_STEP
    cascade_scale: Annotated[float, Field(gt=0.0, le=1.0)] = CASCADE_SCALE
    center_scale: Annotated[float, Field(gt=0.0, le=1.0)] = CENTER_SCALE
    restore_origin: Annotated[int, Field(ge=0)] = RESTORE_ORIGIN
    restore_width: Annotated[int, Field(ge=1)] = RESTORE_WIDTH
    restore_height: Annotated[int, Field(ge=1)] = RESTORE_HEIGHT


class DetectionConfig(BaseModel):
    maximized_width_ratio: Annotated[float, Field(gt=0.0, le=1.0)] = MAXIMIZED_WIDTH_RATIO
    maximized_height_ratio: Annotated[float, Field(gt=0.0, le=1.0)] = MAXIMIZED_HEIGHT_RATIO
    restore_width_ratio: Annotated[float, Field(gt=0.0, le=1.0)] = Field(
        default=RESTORE_WIDTH_RATIO,
        description="Width share of the display above which restore shrinks a window.",
    )
    restore_height_ratio: Annotated[float, Field(gt=0.0, le=1.0)] = RESTORE_HEIGHT_RATIO
    reference_width: Annotated[int, Field(ge=1)] = Field(
        default=REFERENCE_WIDTH,
        description="Resolution assumed for the maximized heuristic when no display is known.",
    )
    reference_height: Annotated[int, Field(ge=1)] = REFERENCE_HEIGHT


class DisplayConfig(BaseModel):
    fallback_id: str = FALLBACK_DISPLAY_ID
    fallback_width: Annotated[int, Field(ge=1)] = FALLBACK_DISPLAY_WIDTH
    fallback_height: Annotated[int, Field(ge=1)] = FALLBACK_DISPLAY_HEIGHT


class EnumerationConfig(BaseModel):
    include_icons: bool = Field(
        default=True,
        description="Resolve one app icon per distinct app during each enumeration.",
    )
    icon_size: Annotated[int, Field(ge=16, le=512)] = 32


class ResourceConfig(BaseModel):
    enabled: bool = Field(
        default=False,
        description="Attach per-app CPU and memory usage to enumerated windows.",
    )
    sample_interval: Annotated[float, Field(ge=0.0, le=5.0)] = Field(
        default=0.2,
        description="Seconds between the two CPU readings of one sample.",
    )
    top_processes: Annotated[int, Field(ge=0, le=50)] = Field(
        default=5,
        description="Number of busiest processes reported in the CPU summary.",
    )


class LoggingConfig(BaseModel):
    level: Literal["debug", "info", "warning", "error", "critical"] = "info"
    format: Literal["json", "console"] = "console"
    file: Path | None = None


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WINDOW_BRIDGE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    bridge: BridgeConfig = Field(default_factory=BridgeConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    displays: DisplayConfig = Field(default_factory=DisplayConfig)
    enumeration: EnumerationConfig = Field(default_factory=EnumerationConfig)
    resources: ResourceConfig = Field(default_factory=ResourceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_file: Path | None = None) -> "Settings":
        """Load settings from YAML files + environment variables."""
        data: dict[str, object] = {}

        candidates = [
            Path("/etc/window-bridge/config.yaml"),
            Path.home() / ".window-bridge" / "config.yaml",
        ]
        if config_file:
            if not config_file.exists():
                raise ConfigError(
                    f"Config file not found: {config_file}",
                    context={"path": str(config_file)},
                )
            candidates.append(config_file)

        for path in candidates:
            if path.exists():
                import yaml  # lazy: only needed when a file exists

                try:
                    with path.open() as f:
                        loaded = yaml.safe_load(f) or {}
                except yaml.YAMLError as exc:
                    raise ConfigError(
                        f"Invalid YAML in {path}: {exc}", context={"path": str(path)}
                    ) from exc
                if not isinstance(loaded, dict):
                    raise ConfigError(
                        f"Config file {path} must contain a mapping",
                        context={"path": str(path)},
                    )
                data.update(loaded)

        return cls(**data)


# Module-level singleton, replaced by ``Settings.load()`` at CLI startup.
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def override_settings(settings: Settings) -> None:
    """Replace the module-level singleton. Used by the CLI and in tests."""
    global _settings
    _settings = settings
