"""
Stylesheet emitter.

Serializes a ResolvedTokens into one CSS payload, in fixed order:

1. A ``:root`` block of custom properties in schema order
2. Templated rules that cannot be expressed as custom properties
   (page background, widget border/shape/shadow, typography, social icons)
3. Gradient-aware text color blocks for the four text roles
4. Pre-authored effect templates (spatial, glow keyframes, animations)

This is the last point before theme and page strings reach an HTML
response, so every value is re-checked here. An unsafe value is
replaced with the built-in default for its slot.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from pagetheme.errors import IncompleteTokensError
from pagetheme.specs.keywords import BorderEffect, SpatialEffect, match_keyword
from pagetheme.specs.resolved import ResolvedTokens
from pagetheme.specs.theme import PageOverrides, Theme

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .derive import (
    composite_shadow,
    format_number,
    google_fonts_url,
    is_finite_number,
    is_gradient,
    text_color_declarations,
    theme_class,
    title_text_shadow,
)
from .effects import (
    GLOW_KEYFRAMES,
    animation_keyframes,
    featured_effect_rule,
    page_name_effect_rule,
    spatial_effect_rules,
)
from .resolver import resolve
from .safety import CSS_GENERIC_FAMILIES, is_css_safe, is_safe_font_name

logger = logging.getLogger(__name__)


class StylesheetOutput(BaseModel):
    """
    Everything the page renderer needs from one emission.

    Example:
        output = render_theme(theme, page)
        # <style>{{ output.css }}</style>
        # <body class="{{ output.body_class }}">
    """

    model_config = ConfigDict(frozen=True)

    css: str
    body_class: str
    spatial_effect_class: str | None = None
    theme_class: str | None = None
    page_title_class: str | None = None
    featured_class: str | None = None
    fonts_url: str | None = None


# =============================================================================
# :root schema
# =============================================================================


def _font_stack(name: str) -> str:
    if name.lower() in CSS_GENERIC_FAMILIES:
        return name
    return f"'{name}', sans-serif"


def _rem(value: float) -> str:
    return f"{format_number(value)}rem"


def _plain(value: Any) -> str:
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)


# (custom property, ResolvedTokens field, formatter), in emission order
_ROOT_PROPERTIES: list[tuple[str, str, Callable[[Any], str]]] = [
    # Color
    ("--color-background-frame", "color_background_frame", _plain),
    ("--color-background-base", "color_background_base", _plain),
    ("--color-background-surface", "color_background_surface", _plain),
    ("--color-background-surface-translucent", "color_background_surface_translucent", _plain),
    ("--color-background-surface-raised", "color_background_surface_raised", _plain),
    ("--color-background-overlay", "color_background_overlay", _plain),
    ("--color-text-primary", "color_text_primary", _plain),
    ("--color-text-secondary", "color_text_secondary", _plain),
    ("--color-text-inverse", "color_text_inverse", _plain),
    ("--color-border-default", "color_border_default", _plain),
    ("--color-border-focus", "color_border_focus", _plain),
    ("--color-accent-primary", "color_accent_primary", _plain),
    ("--color-accent-muted", "color_accent_muted", _plain),
    ("--color-accent-alt", "color_accent_alt", _plain),
    ("--color-accent-highlight", "color_accent_highlight", _plain),
    ("--color-state-success", "color_state_success", _plain),
    ("--color-state-warning", "color_state_warning", _plain),
    ("--color-state-danger", "color_state_danger", _plain),
    ("--color-text-state-success", "color_text_state_success", _plain),
    ("--color-text-state-warning", "color_text_state_warning", _plain),
    ("--color-text-state-danger", "color_text_state_danger", _plain),
    ("--color-text-on-background", "color_text_on_background", _plain),
    ("--color-text-on-surface", "color_text_on_surface", _plain),
    ("--color-text-on-surface-raised", "color_text_on_surface_raised", _plain),
    ("--color-text-on-accent", "color_text_on_accent", _plain),
    ("--color-shadow-ambient", "color_shadow_ambient", _plain),
    ("--color-shadow-focus", "color_shadow_focus", _plain),
    ("--color-glow-primary", "glow_primary", _plain),
    ("--color-glow-secondary", "glow_secondary", _plain),
    ("--color-glow-accent", "glow_accent", _plain),
    ("--gradient-page", "gradient_page", _plain),
    ("--gradient-accent", "gradient_accent", _plain),
    ("--gradient-widget", "gradient_widget", _plain),
    ("--gradient-podcast", "gradient_podcast", _plain),
    ("--page-background", "color_background_base", _plain),
    ("--widget-background", "color_background_surface", _plain),
    ("--widget-border-color", "widget_border_color", _plain),
    # Typography
    ("--font-family-heading", "font_heading", _font_stack),
    ("--font-family-body", "font_body", _font_stack),
    ("--font-family-meta", "font_meta", _font_stack),
    ("--page-primary-font", "font_heading", _font_stack),
    ("--page-secondary-font", "font_body", _font_stack),
    ("--widget-primary-font", "font_widget_heading", _font_stack),
    ("--widget-secondary-font", "font_widget_body", _font_stack),
    ("--heading-font-color", "color_heading", _plain),
    ("--body-font-color", "color_body", _plain),
    ("--widget-heading-font-color", "color_widget_heading", _plain),
    ("--widget-body-font-color", "color_widget_body", _plain),
    ("--type-scale-xl", "type_scale_xl", _rem),
    ("--type-scale-lg", "type_scale_lg", _rem),
    ("--type-scale-md", "type_scale_md", _rem),
    ("--type-scale-sm", "type_scale_sm", _rem),
    ("--type-scale-xs", "type_scale_xs", _rem),
    ("--type-line-height-tight", "line_height_tight", _plain),
    ("--type-line-height-normal", "line_height_normal", _plain),
    ("--type-line-height-relaxed", "line_height_relaxed", _plain),
    ("--type-weight-normal", "weight_normal", _plain),
    ("--type-weight-medium", "weight_medium", _plain),
    ("--type-weight-bold", "weight_bold", _plain),
    # Spacing
    ("--layout-density", "density", _plain),
    ("--space-2xs", "space_2xs", _rem),
    ("--space-xs", "space_xs", _rem),
    ("--space-sm", "space_sm", _rem),
    ("--space-md", "space_md", _rem),
    ("--space-lg", "space_lg", _rem),
    ("--space-xl", "space_xl", _rem),
    ("--space-2xl", "space_2xl", _rem),
    ("--page-vertical-spacing", "vertical_spacing", _plain),
    ("--page-padding", "page_padding", _rem),
    ("--widget-gap", "widget_gap", _plain),
    # Shape
    ("--shape-corner-none", "corner_none", _plain),
    ("--shape-corner-sm", "corner_sm", _plain),
    ("--shape-corner-md", "corner_md", _plain),
    ("--shape-corner-lg", "corner_lg", _plain),
    ("--shape-corner-pill", "corner_pill", _plain),
    ("--button-corner-radius", "button_corner_radius", _plain),
    ("--border-width-hairline", "border_width_hairline", _plain),
    ("--border-width-regular", "border_width_regular", _plain),
    ("--border-width-bold", "border_width_bold", _plain),
    ("--shadow-level-1", "shadow_level_1", _plain),
    ("--shadow-level-2", "shadow_level_2", _plain),
    ("--shadow-focus", "shadow_focus", _plain),
    ("--widget-border-width", "widget_border_width", _plain),
    ("--widget-border-radius", "widget_border_radius", _plain),
    # Motion
    ("--motion-duration-momentary", "duration_momentary", _plain),
    ("--motion-duration-fast", "duration_fast", _plain),
    ("--motion-duration-standard", "duration_standard", _plain),
    ("--motion-easing-standard", "easing_standard", _plain),
    ("--motion-easing-decelerate", "easing_decelerate", _plain),
    ("--focus-ring-width", "focus_ring_width", _plain),
    ("--focus-ring-offset", "focus_ring_offset", _plain),
    ("--focus-ring-color", "color_border_focus", _plain),
    # Iconography
    ("--icon-size", "icon_size", _plain),
    ("--icon-color", "icon_color", _plain),
    ("--icon-spacing", "icon_spacing", _plain),
    ("--social-icon-color", "social_icon_color", _plain),
]

_KEYWORD_FIELDS: dict[str, type[StrEnum]] = {
    name: field.annotation
    for name, field in ResolvedTokens.model_fields.items()
    if isinstance(field.annotation, type) and issubclass(field.annotation, StrEnum)
}

_OPTIONAL_FIELDS = frozenset({"theme_name"})


# =============================================================================
# Emission
# =============================================================================


def emit(
    resolved: ResolvedTokens,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> StylesheetOutput:
    """
    Serialize resolved tokens into CSS plus body/effect classes and the fonts URL.

    Output is deterministic: the same ResolvedTokens and config always
    produce byte-identical CSS.

    Args:
        resolved: Fully populated token set
        config: Built-in defaults used to replace unsafe values

    Returns:
        StylesheetOutput

    Raises:
        IncompleteTokensError: If a slot is missing or empty
    """
    values = _checked_values(resolved, config)
    shadow = composite_shadow(
        effect=values["border_effect"],
        shadow_intensity=values["shadow_intensity"],
        glow_color=values["glow_color"],
        glow_width=values["glow_width"],
        glow_opacity=values["glow_opacity"],
        level_1=values["shadow_level_1"],
        level_2=values["shadow_level_2"],
    )
    title_shadow = title_text_shadow(
        effect=values["title_effect"],
        border_color=values["title_border_color"],
        border_width=values["title_border_width"],
        shadow_color=values["title_shadow_color"],
        shadow_intensity=values["title_shadow_intensity"],
        shadow_depth=values["title_shadow_depth"],
        shadow_blur=values["title_shadow_blur"],
        glow_color=values["title_glow_color"],
        glow_width=values["title_glow_width"],
    )

    root_lines = [f"  {prop}: {fmt(values[field])};" for prop, field, fmt in _ROOT_PROPERTIES]
    root_lines.extend(
        [
            f"  --widget-box-shadow: {shadow.rest};",
            f"  --widget-hover-shadow: {shadow.hover};",
            f"  --widget-glow-color: {values['glow_color']};",
            f"  --widget-glow-blur: {format_number(values['glow_width'])}px;",
            f"  --widget-glow-opacity: {format_number(values['glow_opacity'])};",
            f"  --page-title-text-shadow: {title_shadow};",
        ]
    )

    slug = theme_class(resolved.theme_name)
    blocks: list[str] = []
    if slug:
        blocks.append(f"/* pagetheme: {slug} */")
    blocks.append(":root {\n" + "\n".join(root_lines) + "\n}")
    blocks.extend(_template_rules(values))
    blocks.extend(_text_color_rules(values))
    blocks.extend(_effect_rules(values))

    spatial = values["spatial_effect"]
    spatial_class = None if spatial is SpatialEffect.NONE else f"spatial-{spatial.value}"
    page_name = values["page_name_effect"]
    featured = values["featured_effect"]

    return StylesheetOutput(
        css="\n\n".join(block for block in blocks if block) + "\n",
        body_class=" ".join(c for c in (spatial_class, slug) if c),
        spatial_effect_class=spatial_class,
        theme_class=slug,
        page_title_class=None if page_name.value == "none" else f"page-title-effect-{page_name}",
        featured_class=None if featured.value == "none" else f"featured-effect-{featured}",
        fonts_url=google_fonts_url(
            [
                values["font_heading"],
                values["font_body"],
                values["font_widget_heading"],
                values["font_widget_body"],
                values["font_meta"],
            ],
            config.font_weights,
        ),
    )


def render_theme(
    theme: Theme | None,
    page: PageOverrides | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> StylesheetOutput:
    """Resolve and emit in one pass."""
    return emit(resolve(theme, page, config), config)


def _checked_values(resolved: ResolvedTokens, config: EngineConfig) -> dict[str, Any]:
    """
    Read every slot, replacing unsafe values with the built-in default.

    Raises:
        IncompleteTokensError: If a slot is missing or empty
    """
    defaults: ResolvedTokens | None = None
    values: dict[str, Any] = {}

    for name in ResolvedTokens.model_fields:
        if name in _OPTIONAL_FIELDS:
            continue
        value = getattr(resolved, name, None)
        if value is None or value == "":
            raise IncompleteTokensError("slot is empty", slot=name)

        if not _is_acceptable(name, value, config):
            if defaults is None:
                defaults = resolve(None, None, config)
            logger.warning("Replacing unsafe value for %s with the built-in default", name)
            value = getattr(defaults, name)
        elif name in _KEYWORD_FIELDS:
            value = match_keyword(_KEYWORD_FIELDS[name], value)
        values[name] = value

    return values


def _is_acceptable(name: str, value: Any, config: EngineConfig) -> bool:
    if name in _KEYWORD_FIELDS:
        return match_keyword(_KEYWORD_FIELDS[name], value) is not None
    if name.startswith("font_"):
        return is_safe_font_name(value)
    if ResolvedTokens.model_fields[name].annotation in (int, float):
        return is_finite_number(value) and value >= 0
    return isinstance(value, str) and is_css_safe(value, config.max_value_length)


# =============================================================================
# Templated rules
# =============================================================================


def _rule(selector: str, declarations: list[str]) -> str:
    body = "\n".join(f"  {decl}" for decl in declarations)
    return f"{selector} {{\n{body}\n}}"


def _template_rules(values: dict[str, Any]) -> list[str]:
    page_background = values["color_background_base"]
    body = [f"background: {page_background};"]
    if not is_gradient(page_background):
        body.append("background-attachment: fixed;")
    body.extend(
        [
            "color: var(--color-text-primary);",
            "font-family: var(--font-family-body);",
            "line-height: var(--type-line-height-normal);",
            "min-height: 100vh;",
            "margin: 0;",
        ]
    )

    widget = [
        "background: var(--widget-background);",
        "border: var(--widget-border-width) solid var(--widget-border-color);",
        "border-radius: var(--widget-border-radius);",
        "box-shadow: var(--widget-box-shadow);",
        "padding: var(--space-sm) var(--space-md);",
        "font-family: var(--widget-secondary-font);",
        "transition: transform var(--motion-duration-fast) var(--motion-easing-standard), "
        "box-shadow var(--motion-duration-fast) var(--motion-easing-standard);",
    ]
    if values["border_effect"] is BorderEffect.GLOW:
        widget.append("position: relative;")

    return [
        _rule("html", [f"background: {page_background};", "min-height: 100%;"]),
        _rule("body", body),
        _rule("h1, h2, h3, .page-title", ["font-family: var(--font-family-heading);"]),
        _rule(".page-title", ["text-shadow: var(--page-title-text-shadow);"]),
        _rule(
            ".page-container",
            [
                "padding-left: var(--page-padding);",
                "padding-right: var(--page-padding);",
                "row-gap: var(--page-vertical-spacing);",
            ],
        ),
        _rule(".widgets-container", ["gap: var(--widget-gap);"]),
        _rule(".widget-item", widget),
        _rule(".widget-item:hover", ["box-shadow: var(--widget-hover-shadow);"]),
        _rule(".widget-title", ["font-family: var(--widget-primary-font);"]),
        _rule(".page-button, .btn", ["border-radius: var(--button-corner-radius);"]),
        _rule(".social-icons", ["gap: var(--icon-spacing);"]),
        _rule(
            "body .social-icon",
            [
                "color: var(--icon-color);",
                "width: var(--icon-size);",
                "height: var(--icon-size);",
                "font-size: calc(var(--icon-size) * 0.625);",
            ],
        ),
        _rule("body .social-icon:hover", ["opacity: 0.8;"]),
        _rule(
            ":focus-visible",
            [
                "outline: var(--focus-ring-width) solid var(--focus-ring-color);",
                "outline-offset: var(--focus-ring-offset);",
            ],
        ),
    ]


def _text_color_rules(values: dict[str, Any]) -> list[str]:
    """Literal color rules; gradients need a multi-declaration block."""
    roles = [
        ("h1, h2, h3, .page-title", "color_heading"),
        ("p, .page-description", "color_body"),
        (".widget-item .widget-title", "color_widget_heading"),
        (".widget-item .widget-description", "color_widget_body"),
    ]
    return [_rule(selector, text_color_declarations(values[field])) for selector, field in roles]


def _effect_rules(values: dict[str, Any]) -> list[str]:
    blocks = [spatial_effect_rules(values["spatial_effect"])]
    if values["border_effect"] is BorderEffect.GLOW:
        blocks.append(GLOW_KEYFRAMES)
    blocks.extend(animation_keyframes(values["page_name_effect"], values["featured_effect"]))
    blocks.append(page_name_effect_rule(values["page_name_effect"]))
    blocks.append(featured_effect_rule(values["featured_effect"]))
    return blocks
