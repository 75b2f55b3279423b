"""
Engine configuration.

The built-in defaults (the last precedence layer) and the density
multiplier tables live on an explicit, immutable ``EngineConfig`` that is
passed into the resolver and emitter. ``DEFAULT_ENGINE_CONFIG`` holds the
stock values; deployments can layer a TOML file over it with
``load_engine_config``.

Example pagetheme.toml:

    [pagetheme]
    default_font = "Inter"
    font_weights = [400, 600, 700]

    [pagetheme.color_tokens.accent]
    primary = "#2563eb"

    [pagetheme.spacing_tokens.density_multipliers.compact]
    md = 0.8
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from pagetheme.errors import ThemeConfigError
from pagetheme.specs.keywords import Density
from pagetheme.specs.theme import (
    ColorTokens,
    IconographyTokens,
    MotionTokens,
    ShapeTokens,
    SpacingTokens,
    TypographyTokens,
    WidgetStyles,
)

from .safety import DEFAULT_MAX_VALUE_LENGTH, is_css_safe, is_safe_font_name

logger = logging.getLogger(__name__)


# =============================================================================
# Stock defaults
# =============================================================================

_COLOR_DEFAULTS: dict[str, Any] = {
    "background": {
        "frame": "#eef2f7",
        "base": "#f5f7fa",
        "surface": "#ffffff",
        "surface_translucent": "rgba(255, 255, 255, 0.85)",
        "surface_raised": "#f9fafb",
        "overlay": "rgba(15, 23, 42, 0.6)",
    },
    "text": {"primary": "#111827", "secondary": "#4b5563", "inverse": "#ffffff"},
    "border": {"default": "#d1d5db", "focus": "#2563eb"},
    "accent": {
        "primary": "#0066ff",
        "muted": "#e0edff",
        "alt": "#7c3aed",
        "highlight": "#f59e0b",
    },
    "state": {"success": "#12b76a", "warning": "#f59e0b", "danger": "#ef4444"},
    "text_state": {"success": "#0f5132", "warning": "#7c2d12", "danger": "#7f1d1d"},
    "shadow": {"ambient": "rgba(15, 23, 42, 0.12)", "focus": "rgba(37, 99, 235, 0.35)"},
}

_TYPOGRAPHY_DEFAULTS: dict[str, Any] = {
    "effect": {
        "heading": "none",
        "border": {"color": "#000000", "width": 0},
        "shadow": {"color": "#000000", "intensity": 0.5, "depth": 4, "blur": 8},
        "glow": {"color": "#2563eb", "width": 10},
    },
    "scale": {"xl": 2.488, "lg": 1.777, "md": 1.333, "sm": 1.111, "xs": 0.889},
    "line_height": {"tight": 1.2, "normal": 1.5, "relaxed": 1.7},
    "weight": {"normal": 400, "medium": 500, "bold": 600},
}

_UNIFORM = {slot: 1.0 for slot in ("2xs", "xs", "sm", "md", "lg", "xl", "2xl")}

_SPACING_DEFAULTS: dict[str, Any] = {
    "density": "comfortable",
    "base_scale": {"2xs": 0.25, "xs": 0.5, "sm": 0.75, "md": 1.0, "lg": 1.5, "xl": 2.0, "2xl": 3.0},
    "vertical_spacing": "24px",
    "page_multiplier": 1.0,
    "density_multipliers": {
        "compact": {slot: 0.75 for slot in _UNIFORM},
        "comfortable": _UNIFORM,
    },
}

_SHAPE_DEFAULTS: dict[str, Any] = {
    "corner": {"none": "0px", "sm": "0.375rem", "md": "0.75rem", "lg": "1.5rem", "pill": "9999px"},
    "button_corner": {
        "none": "0px",
        "sm": "0.375rem",
        "md": "0.75rem",
        "lg": "1.5rem",
        "pill": "9999px",
    },
    "border_width": {"hairline": "1px", "regular": "2px", "bold": "4px"},
    "shadow": {
        "level_1": "0 1px 2px rgba(15, 23, 42, 0.06)",
        "level_2": "0 16px 48px rgba(15, 23, 42, 0.5)",
        "focus": "0 0 0 4px rgba(37, 99, 235, 0.35)",
    },
}

_MOTION_DEFAULTS: dict[str, Any] = {
    "duration": {"momentary": "80ms", "fast": "150ms", "standard": "250ms"},
    "easing": {
        "standard": "cubic-bezier(0.4, 0, 0.2, 1)",
        "decelerate": "cubic-bezier(0.0, 0, 0.2, 1)",
    },
    "focus": {"ring_width": "3px", "ring_offset": "2px"},
}

_ICONOGRAPHY_DEFAULTS: dict[str, Any] = {"size": "48px", "spacing": "0.75rem"}

_WIDGET_STYLE_DEFAULTS: dict[str, Any] = {
    "border_width": "none",
    "border_effect": "shadow",
    "border_shadow_intensity": "subtle",
    "border_glow_intensity": "subtle",
    "glow_color": "#ff00ff",
    "spacing": "comfortable",
    "shape": "rounded",
}

# Slots that resolve from other resolved values instead of a stock default
_DERIVED_SLOTS = (
    "color_tokens.gradient.",
    "color_tokens.glow.",
    "typography_tokens.font.",
    "typography_tokens.color.",
    "iconography_tokens.color",
    "widget_styles.glow_width",
    "widget_styles.glow_intensity",
)


def _walk(prefix: str, model: BaseModel) -> Iterator[tuple[str, Any]]:
    """Yield (dotted path, value) for every leaf slot of a token model."""
    for name in type(model).model_fields:
        value = getattr(model, name)
        path = f"{prefix}.{name}"
        if isinstance(value, BaseModel):
            yield from _walk(path, value)
        elif isinstance(value, dict):
            for key, item in value.items():
                if isinstance(item, BaseModel):
                    yield from _walk(f"{path}.{key}", item)
                else:
                    yield f"{path}.{key}", item
        else:
            yield path, value


# =============================================================================
# EngineConfig
# =============================================================================


class EngineConfig(BaseModel):
    """
    Built-in defaults and tables used by resolution and emission.

    Every token slot that is not derived from another slot must have a
    CSS-safe default; construction fails with ThemeConfigError otherwise.
    """

    model_config = ConfigDict(frozen=True)

    color_tokens: ColorTokens = Field(
        default_factory=lambda: ColorTokens.model_validate(_COLOR_DEFAULTS)
    )
    typography_tokens: TypographyTokens = Field(
        default_factory=lambda: TypographyTokens.model_validate(_TYPOGRAPHY_DEFAULTS)
    )
    spacing_tokens: SpacingTokens = Field(
        default_factory=lambda: SpacingTokens.model_validate(_SPACING_DEFAULTS),
        description="Base scale, vertical spacing and per-density multiplier tables",
    )
    shape_tokens: ShapeTokens = Field(
        default_factory=lambda: ShapeTokens.model_validate(_SHAPE_DEFAULTS)
    )
    motion_tokens: MotionTokens = Field(
        default_factory=lambda: MotionTokens.model_validate(_MOTION_DEFAULTS)
    )
    iconography_tokens: IconographyTokens = Field(
        default_factory=lambda: IconographyTokens.model_validate(_ICONOGRAPHY_DEFAULTS)
    )
    widget_styles: WidgetStyles = Field(
        default_factory=lambda: WidgetStyles.model_validate(_WIDGET_STYLE_DEFAULTS)
    )

    default_font: str = Field(default="Inter", description="Last-resort font family")
    widget_border_color: str = Field(default="#e2e8f0", description="Widget border fallback")
    font_weights: tuple[int, ...] = Field(
        default=(400, 600, 700), description="Weights requested for every Google font"
    )
    max_value_length: int = Field(
        default=DEFAULT_MAX_VALUE_LENGTH, ge=16, description="Longest accepted CSS value"
    )

    @model_validator(mode="after")
    def _check_complete(self) -> EngineConfig:
        missing: list[str] = []
        unsafe: list[str] = []
        groups = (
            "color_tokens",
            "typography_tokens",
            "spacing_tokens",
            "shape_tokens",
            "motion_tokens",
            "iconography_tokens",
            "widget_styles",
        )
        for group in groups:
            for path, value in _walk(group, getattr(self, group)):
                if path.startswith(_DERIVED_SLOTS):
                    continue
                if value is None:
                    missing.append(path)
                elif not is_css_safe(value, self.max_value_length):
                    unsafe.append(path)

        tables = self.spacing_tokens.density_multipliers
        for density in Density:
            if density.value not in tables:
                missing.append(f"spacing_tokens.density_multipliers.{density.value}")

        if missing:
            raise ThemeConfigError("missing built-in default", slot=", ".join(missing))
        if unsafe:
            raise ThemeConfigError("built-in default is not CSS-safe", slot=", ".join(unsafe))
        if not is_safe_font_name(self.default_font):
            raise ThemeConfigError("not a plain font family name", slot="default_font")
        if not is_css_safe(self.widget_border_color, self.max_value_length):
            raise ThemeConfigError("built-in default is not CSS-safe", slot="widget_border_color")
        if not self.font_weights:
            raise ThemeConfigError("at least one weight is required", slot="font_weights")
        return self


DEFAULT_ENGINE_CONFIG = EngineConfig()


# =============================================================================
# Loading
# =============================================================================


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_engine_config(path: Path) -> EngineConfig:
    """
    Load an EngineConfig from a TOML file.

    Values under the ``[pagetheme]`` table are layered over the stock
    defaults; a file without that table yields the stock configuration.

    Args:
        path: Path to the TOML file

    Returns:
        Validated EngineConfig

    Raises:
        ThemeConfigError: If the file cannot be read or parsed, or the
            resulting configuration is incomplete or unsafe
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ThemeConfigError(f"cannot read config: {e}", slot=str(path)) from e
    except tomllib.TOMLDecodeError as e:
        raise ThemeConfigError(f"invalid TOML: {e}", slot=str(path)) from e

    overrides = data.get("pagetheme", {})
    if not isinstance(overrides, dict):
        raise ThemeConfigError("[pagetheme] must be a table", slot=str(path))
    if not overrides:
        logger.debug("No [pagetheme] table in %s, using stock defaults", path)
        return DEFAULT_ENGINE_CONFIG

    base = DEFAULT_ENGINE_CONFIG.model_dump(by_alias=True, exclude_none=True)
    try:
        return EngineConfig.model_validate(_deep_merge(base, overrides))
    except ValidationError as e:
        raise ThemeConfigError(f"invalid configuration: {e}", slot=str(path)) from e
