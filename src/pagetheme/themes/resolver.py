"""
Theme token resolver.

Merges a theme and a page's overrides into one fully populated
ResolvedTokens. Every logical property runs through the same precedence
chain (highest wins):

1. Page-level override for that property
2. Structured token from the theme's token groups
3. The theme's legacy flat field
4. Built-in default from the EngineConfig

A layer may offer several candidates, tried in order. A candidate that
is empty, malformed or not CSS-safe counts as absent. A missing theme
contributes nothing to layers 2 and 3. Resolution never raises on bad
data; the built-in defaults guarantee termination.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from enum import StrEnum
from typing import Any, TypeVar

from pagetheme.specs.keywords import (
    BorderEffect,
    Density,
    FeaturedEffect,
    GlowIntensity,
    PageNameEffect,
    ShadowIntensity,
    SpatialEffect,
    TextEffect,
    WidgetShape,
    WidgetSpacing,
    match_keyword,
    parse_keyword,
)
from pagetheme.specs.resolved import ResolvedTokens
from pagetheme.specs.theme import SPACING_SLOTS, PageOverrides, Theme

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .derive import (
    GLOW_BLUR,
    GLOW_OPACITY,
    WIDGET_SPACING_GAP,
    format_number,
    is_finite_number,
    optimal_text_color,
    scale_spacing,
)
from .safety import is_css_safe, is_safe_font_name

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=StrEnum)

_EMPTY_THEME = Theme()
_EMPTY_PAGE = PageOverrides()

_BORDER_WIDTH_KEYWORDS = {
    "none": None,
    "0": None,
    "thin": "hairline",
    "hairline": "hairline",
    "regular": "regular",
    "medium": "regular",
    "thick": "bold",
    "bold": "bold",
}

_LENGTH_RE = re.compile(r"^\d+(\.\d+)?(px|rem|em)$")
_NUMBER_RE = re.compile(r"^\d+(\.\d+)?$")

_SHAPE_CORNER = {
    WidgetShape.SQUARE: "corner_none",
    WidgetShape.ROUNDED: "corner_md",
    WidgetShape.ROUND: "corner_pill",
}


def resolve(
    theme: Theme | None,
    page: PageOverrides | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> ResolvedTokens:
    """
    Resolve a theme and page overrides into a complete token set.

    An inactive theme is treated as no theme.

    Args:
        theme: Theme attached to the page, or None when no theme is selected
        page: Page-level overrides (None means no overrides)
        config: Built-in defaults and density tables

    Returns:
        ResolvedTokens with every slot populated
    """
    chain = _Chain(config.max_value_length)
    if theme is not None and not theme.is_active:
        logger.debug("Ignoring inactive theme %r", theme.id)
        theme = None
    theme = theme if theme is not None else _EMPTY_THEME
    page = page if page is not None else _EMPTY_PAGE

    values: dict[str, Any] = {"theme_name": theme.name}
    values.update(_resolve_colors(theme, page, config, chain))
    values.update(_resolve_contrast(values))
    values.update(_resolve_widget_effect(theme, config, chain))
    values.update(_resolve_glow_colors(theme, values, chain))
    values.update(_resolve_typography(theme, page, config, chain, values))
    values.update(_resolve_spacing(theme, page, config, chain))
    values.update(_resolve_shape(theme, config, chain))
    values.update(_resolve_motion(theme, config, chain))
    values.update(_resolve_iconography(theme, page, config, chain, values))
    values.update(_resolve_effects(theme, page))

    return ResolvedTokens(**values)


# =============================================================================
# Precedence chain
# =============================================================================


class _Chain:
    """Runs the precedence chain with a per-kind acceptance test."""

    def __init__(self, max_length: int):
        self.max_length = max_length

    def css(self, *layers: Any, default: str) -> str:
        """First CSS-safe string across the layers."""
        return self._first(layers, self._is_css_string, default)

    def font(self, *layers: Any, default: str) -> str:
        """First plain font family name across the layers."""
        return self._first(layers, is_safe_font_name, default)

    def number(self, *layers: Any, default: float, minimum: float = 0.0) -> float:
        """First finite number >= minimum across the layers."""
        return self._first(
            layers, lambda v: is_finite_number(v) and v >= minimum, default
        )

    def keyword(self, enum_cls: type[K], *candidates: Any, default: K) -> K:
        """First candidate that is a member of the keyword enum."""
        for candidate in candidates:
            matched = match_keyword(enum_cls, candidate)
            if matched is not None:
                return matched
        return default

    def _is_css_string(self, value: Any) -> bool:
        return isinstance(value, str) and is_css_safe(value, self.max_length)

    def _first(self, layers: tuple[Any, ...], accept: Callable[[Any], bool], default: Any) -> Any:
        for layer in layers:
            candidates = layer if isinstance(layer, tuple) else (layer,)
            for candidate in candidates:
                if candidate is None:
                    continue
                if accept(candidate):
                    return candidate
                logger.debug("Rejected token value %r", candidate)
        return default


# =============================================================================
# Color
# =============================================================================


def _resolve_colors(
    theme: Theme, page: PageOverrides, config: EngineConfig, chain: _Chain
) -> dict[str, Any]:
    tokens = theme.color_tokens
    legacy = theme.legacy_colors
    d = config.color_tokens
    css = chain.css

    resolved: dict[str, Any] = {
        "color_background_frame": css(None, tokens.background.frame, default=d.background.frame),
        "color_background_base": css(
            (page.custom_page_background, page.custom_secondary_color),
            tokens.background.base,
            (theme.page_background, legacy.secondary),
            default=d.background.base,
        ),
        "color_background_surface": css(
            page.custom_widget_background,
            tokens.background.surface,
            theme.widget_background,
            default=d.background.surface,
        ),
        "color_background_surface_translucent": css(
            None, tokens.background.surface_translucent,
            default=d.background.surface_translucent,
        ),
        "color_background_surface_raised": css(
            None, tokens.background.surface_raised, default=d.background.surface_raised
        ),
        "color_background_overlay": css(
            None, tokens.background.overlay, default=d.background.overlay
        ),
        "color_text_primary": css(
            page.custom_primary_color, tokens.text.primary, legacy.primary,
            default=d.text.primary,
        ),
        "color_text_secondary": css(None, tokens.text.secondary, default=d.text.secondary),
        "color_text_inverse": css(None, tokens.text.inverse, default=d.text.inverse),
        "color_border_default": css(
            page.custom_border_color,
            tokens.border.default,
            theme.widget_border_color,
            default=d.border.default,
        ),
        "color_border_focus": css(None, tokens.border.focus, default=d.border.focus),
        "color_accent_primary": css(
            page.custom_accent_color, tokens.accent.primary, legacy.accent,
            default=d.accent.primary,
        ),
        "color_accent_muted": css(None, tokens.accent.muted, default=d.accent.muted),
        "color_accent_alt": css(None, tokens.accent.alt, default=d.accent.alt),
        "color_accent_highlight": css(None, tokens.accent.highlight, default=d.accent.highlight),
        "color_state_success": css(None, tokens.state.success, default=d.state.success),
        "color_state_warning": css(None, tokens.state.warning, default=d.state.warning),
        "color_state_danger": css(None, tokens.state.danger, default=d.state.danger),
        "color_text_state_success": css(
            None, tokens.text_state.success, default=d.text_state.success
        ),
        "color_text_state_warning": css(
            None, tokens.text_state.warning, default=d.text_state.warning
        ),
        "color_text_state_danger": css(None, tokens.text_state.danger, default=d.text_state.danger),
        "color_shadow_ambient": css(None, tokens.shadow.ambient, default=d.shadow.ambient),
        "color_shadow_focus": css(None, tokens.shadow.focus, default=d.shadow.focus),
        "widget_border_color": css(
            page.custom_border_color,
            tokens.border.default,
            theme.widget_border_color,
            default=config.widget_border_color,
        ),
    }

    # Gradients decorate a solid value and fall back to it
    gradient = tokens.gradient
    resolved["gradient_page"] = css(
        None, gradient.page, default=resolved["color_background_base"]
    )
    resolved["gradient_accent"] = css(
        None, gradient.accent, default=resolved["color_accent_primary"]
    )
    resolved["gradient_widget"] = css(
        None, gradient.widget, default=resolved["color_background_surface"]
    )
    resolved["gradient_podcast"] = css(
        None, gradient.podcast, default=resolved["gradient_accent"]
    )
    return resolved


def _resolve_contrast(values: dict[str, Any]) -> dict[str, Any]:
    """Text colors guaranteed to read on the page, surface and accent backgrounds."""
    background = values["color_background_base"]
    primary = values["color_text_primary"]
    return {
        "color_text_on_background": optimal_text_color(background, primary),
        "color_text_on_surface": optimal_text_color(values["color_background_surface"], primary),
        "color_text_on_surface_raised": optimal_text_color(
            values["color_background_surface_raised"], primary
        ),
        "color_text_on_accent": optimal_text_color(
            values["color_accent_primary"], values["color_text_inverse"]
        ),
    }


def _resolve_widget_effect(theme: Theme, config: EngineConfig, chain: _Chain) -> dict[str, Any]:
    """Border effect branch, intensities and glow parameters."""
    styles = theme.widget_styles
    d = config.widget_styles

    effect = chain.keyword(
        BorderEffect, styles.border_effect, d.border_effect, default=BorderEffect.SHADOW
    )
    shadow_intensity = chain.keyword(
        ShadowIntensity,
        styles.border_shadow_intensity,
        d.border_shadow_intensity,
        default=ShadowIntensity.SUBTLE,
    )
    glow_intensity = chain.keyword(
        GlowIntensity,
        styles.border_glow_intensity,
        d.border_glow_intensity,
        default=GlowIntensity.SUBTLE,
    )
    glow_color = chain.css(
        None,
        theme.color_tokens.glow.primary,
        styles.glow_color,
        default=d.glow_color,
    )
    glow_width = chain.number(
        None, styles.glow_width, default=GLOW_BLUR[glow_intensity], minimum=0.0
    )
    glow_opacity = chain.number(None, styles.glow_intensity, default=GLOW_OPACITY[glow_intensity])

    return {
        "border_effect": effect,
        "shadow_intensity": shadow_intensity,
        "glow_intensity": glow_intensity,
        "glow_color": glow_color,
        "glow_width": glow_width,
        "glow_opacity": min(glow_opacity, 1.0),
    }


def _resolve_glow_colors(
    theme: Theme, values: dict[str, Any], chain: _Chain
) -> dict[str, Any]:
    glow = theme.color_tokens.glow
    primary = chain.css(None, glow.primary, default=values["glow_color"])
    return {
        "glow_primary": primary,
        "glow_secondary": chain.css(None, glow.secondary, default=primary),
        "glow_accent": chain.css(None, glow.accent, default=primary),
    }


# =============================================================================
# Typography
# =============================================================================


def _resolve_typography(
    theme: Theme,
    page: PageOverrides,
    config: EngineConfig,
    chain: _Chain,
    values: dict[str, Any],
) -> dict[str, Any]:
    tokens = theme.typography_tokens
    d = config.typography_tokens
    font = chain.font
    css = chain.css
    num = chain.number

    heading = font(
        page.custom_heading_font,
        tokens.font.heading,
        (theme.page_primary_font, theme.fonts.heading),
        default=config.default_font,
    )
    body = font(
        page.custom_body_font,
        tokens.font.body,
        (theme.page_secondary_font, theme.fonts.body),
        default=config.default_font,
    )

    # Unset page text colors are contrast-corrected against the page background
    color_heading = css(None, tokens.color.heading, default=values["color_text_on_background"])
    color_body = css(
        None,
        tokens.color.body,
        default=optimal_text_color(
            values["color_background_base"], values["color_text_secondary"]
        ),
    )

    effect = tokens.effect
    de = d.effect

    return {
        "font_heading": heading,
        "font_body": body,
        "font_widget_heading": font(
            None, tokens.font.widget_heading, theme.widget_primary_font, default=heading
        ),
        "font_widget_body": font(
            None, tokens.font.widget_body, theme.widget_secondary_font, default=body
        ),
        "font_meta": font(None, tokens.font.metatext, default=body),
        "color_heading": color_heading,
        "color_body": color_body,
        "color_widget_heading": css(None, tokens.color.widget_heading, default=color_heading),
        "color_widget_body": css(None, tokens.color.widget_body, default=color_body),
        "type_scale_xl": num(None, tokens.scale.xl, default=d.scale.xl),
        "type_scale_lg": num(None, tokens.scale.lg, default=d.scale.lg),
        "type_scale_md": num(None, tokens.scale.md, default=d.scale.md),
        "type_scale_sm": num(None, tokens.scale.sm, default=d.scale.sm),
        "type_scale_xs": num(None, tokens.scale.xs, default=d.scale.xs),
        "line_height_tight": num(None, tokens.line_height.tight, default=d.line_height.tight),
        "line_height_normal": num(None, tokens.line_height.normal, default=d.line_height.normal),
        "line_height_relaxed": num(
            None, tokens.line_height.relaxed, default=d.line_height.relaxed
        ),
        "weight_normal": int(num(None, tokens.weight.normal, default=d.weight.normal, minimum=1)),
        "weight_medium": int(num(None, tokens.weight.medium, default=d.weight.medium, minimum=1)),
        "weight_bold": int(num(None, tokens.weight.bold, default=d.weight.bold, minimum=1)),
        "title_effect": chain.keyword(
            TextEffect, effect.heading, de.heading, default=TextEffect.NONE
        ),
        "title_border_color": css(None, effect.border.color, default=de.border.color),
        "title_border_width": num(None, effect.border.width, default=de.border.width),
        "title_shadow_color": css(None, effect.shadow.color, default=de.shadow.color),
        "title_shadow_intensity": min(
            num(None, effect.shadow.intensity, default=de.shadow.intensity), 1.0
        ),
        "title_shadow_depth": num(None, effect.shadow.depth, default=de.shadow.depth),
        "title_shadow_blur": num(None, effect.shadow.blur, default=de.shadow.blur),
        "title_glow_color": css(None, effect.glow.color, default=de.glow.color),
        "title_glow_width": num(None, effect.glow.width, default=de.glow.width),
    }


# =============================================================================
# Spacing
# =============================================================================


def _resolve_spacing(
    theme: Theme, page: PageOverrides, config: EngineConfig, chain: _Chain
) -> dict[str, Any]:
    """
    Density-scaled spacing scale plus page/widget spacing.

    An unknown density keyword counts as absent at its layer; with no
    recognised keyword anywhere the density is comfortable.
    """
    tokens = theme.spacing_tokens
    d = config.spacing_tokens

    density = chain.keyword(
        Density,
        page.layout_density,
        tokens.density,
        theme.layout_density,
        d.density,
        default=Density.COMFORTABLE,
    )

    theme_table = tokens.density_multipliers.get(density.value)
    config_table = d.density_multipliers.get(density.value)
    base: dict[str, float] = {}
    multipliers: dict[str, float] = {}
    for slot in SPACING_SLOTS:
        base[slot] = chain.number(None, tokens.base_scale.get(slot), default=d.base_scale.get(slot))
        multipliers[slot] = chain.number(
            theme_table.get(slot) if theme_table else None,
            config_table.get(slot) if config_table else None,
            default=1.0,
        )
    scaled = scale_spacing(base, multipliers)

    vertical = tokens.vertical_spacing
    if is_finite_number(vertical) and vertical >= 0:
        vertical = f"{format_number(vertical)}px"
    vertical_spacing = chain.css(None, vertical, default=d.vertical_spacing)

    page_multiplier = chain.number(
        None, tokens.page_multiplier, default=d.page_multiplier, minimum=0.0
    )
    if page_multiplier <= 0:
        page_multiplier = 1.0

    if tokens.base_scale.lg is not None and is_finite_number(tokens.base_scale.lg):
        widget_gap = f"{format_number(scaled['lg'])}rem"
    else:
        spacing_keyword = match_keyword(WidgetSpacing, theme.widget_styles.spacing)
        if spacing_keyword is not None:
            widget_gap = WIDGET_SPACING_GAP[spacing_keyword]
        else:
            widget_gap = f"{format_number(scaled['lg'])}rem"

    return {
        "density": density,
        "space_2xs": scaled["2xs"],
        "space_xs": scaled["xs"],
        "space_sm": scaled["sm"],
        "space_md": scaled["md"],
        "space_lg": scaled["lg"],
        "space_xl": scaled["xl"],
        "space_2xl": scaled["2xl"],
        "vertical_spacing": vertical_spacing,
        "page_padding": scaled["lg"] * page_multiplier,
        "widget_gap": widget_gap,
    }


# =============================================================================
# Shape and motion
# =============================================================================


def _border_width_value(raw: Any, widths: dict[str, str]) -> str | None:
    """Map a widget_styles.border_width keyword or pixel count to a length."""
    if is_finite_number(raw):
        return f"{format_number(raw)}px" if raw > 0 else "0px"
    if not isinstance(raw, str):
        return None
    key = raw.strip().lower()
    if key in _BORDER_WIDTH_KEYWORDS:
        slot = _BORDER_WIDTH_KEYWORDS[key]
        return widths[slot] if slot else "0px"
    if _LENGTH_RE.match(key):
        return key
    try:
        number = float(key)
    except ValueError:
        logger.debug("Unknown widget border width %r", raw)
        return None
    return _border_width_value(number, widths)


def _resolve_shape(theme: Theme, config: EngineConfig, chain: _Chain) -> dict[str, Any]:
    tokens = theme.shape_tokens
    d = config.shape_tokens
    css = chain.css

    resolved: dict[str, Any] = {
        "corner_none": css(None, tokens.corner.none, default=d.corner.none),
        "corner_sm": css(None, tokens.corner.sm, default=d.corner.sm),
        "corner_md": css(None, tokens.corner.md, default=d.corner.md),
        "corner_lg": css(None, tokens.corner.lg, default=d.corner.lg),
        "corner_pill": css(None, tokens.corner.pill, default=d.corner.pill),
        "border_width_hairline": css(
            None, tokens.border_width.hairline, default=d.border_width.hairline
        ),
        "border_width_regular": css(
            None, tokens.border_width.regular, default=d.border_width.regular
        ),
        "border_width_bold": css(None, tokens.border_width.bold, default=d.border_width.bold),
        "shadow_level_1": css(None, tokens.shadow.level_1, default=d.shadow.level_1),
        "shadow_level_2": css(None, tokens.shadow.level_2, default=d.shadow.level_2),
        "shadow_focus": css(None, tokens.shadow.focus, default=d.shadow.focus),
    }

    button = tokens.button_corner
    resolved["button_corner_radius"] = css(
        None, (button.md, button.pill, button.none), default=resolved["corner_md"]
    )

    widths = {
        "hairline": resolved["border_width_hairline"],
        "regular": resolved["border_width_regular"],
        "bold": resolved["border_width_bold"],
    }
    resolved["widget_border_width"] = css(
        None,
        _border_width_value(theme.widget_styles.border_width, widths),
        default=_border_width_value(config.widget_styles.border_width, widths) or "0px",
    )

    shape = chain.keyword(
        WidgetShape,
        theme.widget_styles.shape,
        config.widget_styles.shape,
        default=WidgetShape.ROUNDED,
    )
    resolved["widget_border_radius"] = resolved[_SHAPE_CORNER[shape]]
    return resolved


def _resolve_motion(theme: Theme, config: EngineConfig, chain: _Chain) -> dict[str, Any]:
    tokens = theme.motion_tokens
    d = config.motion_tokens
    css = chain.css
    return {
        "duration_momentary": css(None, tokens.duration.momentary, default=d.duration.momentary),
        "duration_fast": css(None, tokens.duration.fast, default=d.duration.fast),
        "duration_standard": css(None, tokens.duration.standard, default=d.duration.standard),
        "easing_standard": css(None, tokens.easing.standard, default=d.easing.standard),
        "easing_decelerate": css(None, tokens.easing.decelerate, default=d.easing.decelerate),
        "focus_ring_width": css(None, tokens.focus.ring_width, default=d.focus.ring_width),
        "focus_ring_offset": css(None, tokens.focus.ring_offset, default=d.focus.ring_offset),
    }


# =============================================================================
# Iconography
# =============================================================================


def _with_unit(raw: Any, unit: str) -> Any:
    """Give a bare number (or numeric string) a unit; other values pass through."""
    if isinstance(raw, str) and _NUMBER_RE.match(raw.strip()):
        raw = float(raw)
    if is_finite_number(raw):
        return f"{format_number(raw)}{unit}" if raw >= 0 else None
    return raw


def _resolve_iconography(
    theme: Theme,
    page: PageOverrides,
    config: EngineConfig,
    chain: _Chain,
    values: dict[str, Any],
) -> dict[str, Any]:
    """
    Social icon size, color and spacing.

    Page icon tokens beat theme icon tokens. Without an explicit icon
    color the icons use the accent color, contrast-corrected against the
    page background.
    """
    tokens = theme.iconography_tokens
    page_tokens = page.iconography_tokens
    d = config.iconography_tokens
    css = chain.css

    social_icon_color = optimal_text_color(
        values["color_background_base"], values["color_accent_primary"]
    )
    return {
        "icon_size": css(
            _with_unit(page_tokens.size, "px"),
            _with_unit(tokens.size, "px"),
            default=_with_unit(d.size, "px") or str(d.size),
        ),
        "icon_color": css(page_tokens.color, tokens.color, default=social_icon_color),
        "icon_spacing": css(
            _with_unit(page_tokens.spacing, "rem"),
            _with_unit(tokens.spacing, "rem"),
            default=_with_unit(d.spacing, "rem") or str(d.spacing),
        ),
        "social_icon_color": social_icon_color,
    }


# =============================================================================
# Pre-authored effects
# =============================================================================


def _resolve_effects(theme: Theme, page: PageOverrides) -> dict[str, Any]:
    """Spatial, page title and featured widget effect keywords."""
    spatial = match_keyword(SpatialEffect, page.spatial_effect) or match_keyword(
        SpatialEffect, theme.spatial_effect
    )
    return {
        "spatial_effect": spatial or SpatialEffect.NONE,
        "page_name_effect": parse_keyword(
            PageNameEffect, page.page_name_effect, PageNameEffect.NONE
        ),
        "featured_effect": parse_keyword(
            FeaturedEffect, page.featured_effect, FeaturedEffect.JIGGLE
        ),
    }
