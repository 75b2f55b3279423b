"""
Theme resolution and stylesheet generation.

Usage:
    from pagetheme.themes import render_theme, render_head, resolve, emit

    theme = Theme.from_row(theme_row)
    page = PageOverrides.model_validate(page_row)

    # One pass
    output = render_theme(theme, page)

    # Or step by step
    tokens = resolve(theme, page)
    output = emit(tokens)

    head_html = render_head(output)
    body_class = output.body_class
"""

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig, load_engine_config
from .css_generator import StylesheetOutput, emit, render_theme
from .derive import (
    composite_shadow,
    contrast_ratio,
    dominant_color,
    google_fonts_url,
    hex_to_rgba,
    is_gradient,
    optimal_text_color,
    relative_luminance,
    scale_spacing,
    text_color_declarations,
    theme_class,
)
from .head import render_head
from .resolver import resolve
from .safety import is_css_safe, is_safe_font_name

__all__ = [
    # Configuration
    "DEFAULT_ENGINE_CONFIG",
    "EngineConfig",
    "load_engine_config",
    # Resolution
    "resolve",
    # Derivation
    "composite_shadow",
    "contrast_ratio",
    "dominant_color",
    "google_fonts_url",
    "hex_to_rgba",
    "is_gradient",
    "optimal_text_color",
    "relative_luminance",
    "scale_spacing",
    "text_color_declarations",
    "theme_class",
    # Emission
    "StylesheetOutput",
    "emit",
    "render_theme",
    "render_head",
    # Safety
    "is_css_safe",
    "is_safe_font_name",
]
