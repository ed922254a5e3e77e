"""Configuration management for conceptmap using Pydantic models."""

import json
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CONFIG_FILE_NAME = ".conceptmap.json"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class TierPalette(BaseModel):
    """Fill, text and border colours for one concept tier."""
    fill: str
    text: str
    border: str


class ThemeConfig(BaseModel):
    """Presentation constants handed to the rendering engine once at startup."""
    font_family: str = Field(alias="fontFamily", default="Inter, system-ui, -apple-system, sans-serif")
    font_size: str = Field(alias="fontSize", default="13px")
    root: TierPalette = Field(default_factory=lambda: TierPalette(
        fill="#fef3c7", text="#78350f", border="#f59e0b"
    ))
    secondary: TierPalette = Field(default_factory=lambda: TierPalette(
        fill="#dbeafe", text="#1e40af", border="#3b82f6"
    ))
    tertiary: TierPalette = Field(default_factory=lambda: TierPalette(
        fill="#e0e7ff", text="#4338ca", border="#6366f1"
    ))
    line_color: str = Field(alias="lineColor", default="#94a3b8")
    padding: int = 50
    node_spacing: int = Field(alias="nodeSpacing", default=300)
    rank_spacing: int = Field(alias="rankSpacing", default=250)

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_mermaid_config(self) -> dict[str, Any]:
        """Build the Mermaid initialisation document for this theme."""
        return {
            "theme": "default",
            "securityLevel": "loose",
            "themeVariables": {
                "fontSize": self.font_size,
                "fontFamily": self.font_family,
                "primaryColor": self.root.fill,
                "primaryTextColor": self.root.text,
                "primaryBorderColor": self.root.border,
                "secondaryColor": self.secondary.fill,
                "secondaryTextColor": self.secondary.text,
                "secondaryBorderColor": self.secondary.border,
                "tertiaryColor": self.tertiary.fill,
                "tertiaryTextColor": self.tertiary.text,
                "tertiaryBorderColor": self.tertiary.border,
                "lineColor": self.line_color,
            },
            "mindmap": {
                "padding": self.padding,
                "useMaxWidth": False,
            },
            "maxTextSize": 300000,
            "wrap": True,
            "htmlLabels": True,
            "flowchart": {
                "nodeSpacing": self.node_spacing,
                "rankSpacing": self.rank_spacing,
                "curve": "basis",
                "padding": 20,
                "diagramPadding": 20,
            },
        }


class LabelConfig(BaseModel):
    """Label truncation limits per concept tier."""
    root_limit: int = Field(alias="rootLimit", default=25)
    secondary_limit: int = Field(alias="secondaryLimit", default=22)
    tertiary_limit: int = Field(alias="tertiaryLimit", default=20)
    word_boundary_ratio: float = Field(alias="wordBoundaryRatio", default=0.6)
    ellipsis: str = "..."

    @field_validator("root_limit", "secondary_limit", "tertiary_limit")
    @classmethod
    def validate_limit(cls, v):
        if v < 1:
            raise ValueError("label limits must be >= 1")
        return v

    @field_validator("word_boundary_ratio")
    @classmethod
    def validate_ratio(cls, v):
        if not (0 < v < 1):
            raise ValueError(f"word_boundary_ratio must be between 0 and 1, got: {v}")
        return v

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class RenderConfig(BaseModel):
    """Rendering engine and drawing surface configuration."""
    mmdc_path: str = Field(alias="mmdcPath", default="mmdc")
    timeout_seconds: float | None = Field(alias="timeoutSeconds", default=None)
    surface_width: int = Field(alias="surfaceWidth", default=1400)
    surface_height: int = Field(alias="surfaceHeight", default=1400)
    background: str = "white"

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError(f"timeout_seconds must be positive, got: {v}")
        return v

    @field_validator("surface_width", "surface_height")
    @classmethod
    def validate_surface(cls, v):
        if v < 0:
            raise ValueError("surface dimensions must be >= 0")
        return v

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ViewConfig(BaseModel):
    """Zoom bounds and steps for the view controls."""
    zoom_min: float = Field(alias="zoomMin", default=0.3)
    zoom_max: float = Field(alias="zoomMax", default=2.5)
    zoom_initial: float = Field(alias="zoomInitial", default=0.3)
    zoom_reset: float = Field(alias="zoomReset", default=0.4)
    zoom_step: float = Field(alias="zoomStep", default=0.1)
    wheel_step: float = Field(alias="wheelStep", default=0.05)

    @model_validator(mode="after")
    def validate_bounds(self):
        if self.zoom_min >= self.zoom_max:
            raise ValueError("zoom_min must be lower than zoom_max")
        for name in ("zoom_initial", "zoom_reset"):
            value = getattr(self, name)
            if not (self.zoom_min <= value <= self.zoom_max):
                raise ValueError(f"{name} must lie within [{self.zoom_min}, {self.zoom_max}], got: {value}")
        return self

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.INFO

    model_config = ConfigDict(use_enum_values=True, frozen=True)


class ConceptMapConfig(BaseModel):
    """Complete conceptmap configuration model."""
    theme: ThemeConfig = Field(default_factory=ThemeConfig)
    labels: LabelConfig = Field(default_factory=LabelConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    view: ViewConfig = Field(default_factory=ViewConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid", frozen=True)


def load_config(config_path: str | Path | None = None) -> ConceptMapConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .conceptmap.json

    Returns:
        ConceptMapConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
            return ConceptMapConfig(**config_data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}")
        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}")
    else:
        return create_default_config()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .conceptmap.json by searching up the directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None


def create_default_config() -> ConceptMapConfig:
    """Create default configuration."""
    return ConceptMapConfig()
