"""
Derivation functions.

Pure functions computing values that are not stored on a theme:
density-scaled spacing, contrast-corrected text colors, composite widget
shadows, gradient-aware text color, the page title text-shadow, the
Google Fonts URL and the theme class slug. No shared state; each is
usable on its own.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from urllib.parse import quote_plus

from pagetheme.specs.keywords import (
    BorderEffect,
    GlowIntensity,
    ShadowIntensity,
    TextEffect,
    WidgetSpacing,
)

from .safety import is_generic_family

# =============================================================================
# Preset tables
# =============================================================================

# Glow blur radius (px) and alpha implied by the glow intensity keyword
GLOW_BLUR: dict[GlowIntensity, float] = {
    GlowIntensity.SUBTLE: 8.0,
    GlowIntensity.PRONOUNCED: 16.0,
}

GLOW_OPACITY: dict[GlowIntensity, float] = {
    GlowIntensity.SUBTLE: 0.5,
    GlowIntensity.PRONOUNCED: 0.8,
}

# Hover elevation for the shadow branch
HOVER_SHADOW: dict[ShadowIntensity, str | None] = {
    ShadowIntensity.NONE: "0 4px 12px rgba(0, 0, 0, 0.1)",
    ShadowIntensity.SUBTLE: None,  # level_2
    ShadowIntensity.PRONOUNCED: "0 20px 56px rgba(15, 23, 42, 0.6)",
}

# Legacy widget_styles.spacing keyword -> widget gap
WIDGET_SPACING_GAP: dict[WidgetSpacing, str] = {
    WidgetSpacing.TIGHT: "0.5rem",
    WidgetSpacing.COMFORTABLE: "1rem",
    WidgetSpacing.SPACIOUS: "1.5rem",
}

# Fallback color when a glow/shadow color is not a valid hex value
FALLBACK_RGB = (255, 0, 255)

# Minimum text/background contrast before a fallback text color is used
CONTRAST_THRESHOLD = 4.0

GOOGLE_FONTS_BASE = "https://fonts.googleapis.com/css2"

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_HEX_STOP_RE = re.compile(r"#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{3})\b")
_SLUG_RE = re.compile(r"[^a-z0-9]+")


# =============================================================================
# Numbers
# =============================================================================


def format_number(value: float) -> str:
    """
    Format a number for CSS: at most four decimals, no trailing zeros.

    >>> format_number(0.75)
    '0.75'
    >>> format_number(1.5 * 1.1)
    '1.65'
    >>> format_number(12.0)
    '12'
    """
    text = f"{round(value, 4):.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def scale_spacing(
    base_scale: Mapping[str, float],
    multipliers: Mapping[str, float],
) -> dict[str, float]:
    """
    Apply a density multiplier table to a base spacing scale.

    Slots missing from the multiplier table are left unscaled. The result
    is the exact float product; rounding happens only at emission.

    Args:
        base_scale: Slot -> base value in rem
        multipliers: Slot -> multiplier for the active density

    Returns:
        Slot -> scaled value in rem
    """
    return {slot: base * multipliers.get(slot, 1.0) for slot, base in base_scale.items()}


# =============================================================================
# Colors
# =============================================================================


def hex_to_rgba(color: str, opacity: float) -> str:
    """
    Convert ``#rgb``/``#rrggbb`` to ``rgba(r, g, b, a)``.

    Opacity is clamped to [0, 1]. An unparseable color yields magenta so
    that a broken glow is visible rather than silently transparent.
    """
    alpha = format_number(min(max(opacity, 0.0), 1.0))
    r, g, b = _parse_hex(color) or FALLBACK_RGB
    return f"rgba({r}, {g}, {b}, {alpha})"


def color_at_opacity(color: str, opacity: float) -> str:
    """Apply opacity to hex colors; other color syntaxes pass through unchanged."""
    stripped = color.strip()
    if stripped.startswith("#") and _HEX_RE.match(stripped):
        return hex_to_rgba(stripped, opacity)
    return color


def _parse_hex(color: object) -> tuple[int, int, int] | None:
    match = _HEX_RE.match(color.strip()) if isinstance(color, str) else None
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return tuple(int(digits[i : i + 2], 16) for i in (0, 2, 4))  # type: ignore[return-value]


def relative_luminance(color: str) -> float:
    """
    Relative luminance of a hex color, from 0 (black) to 1 (white).

    Anything that is not ``#rgb``/``#rrggbb`` counts as mid-grey (0.5).

    >>> relative_luminance("#000000")
    0.0
    >>> relative_luminance("rgba(0, 0, 0, 0.5)")
    0.5
    """
    rgb = _parse_hex(color)
    if rgb is None:
        return 0.5

    def channel(value: int) -> float:
        c = value / 255
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    r, g, b = (channel(v) for v in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(first: str, second: str) -> float:
    """Contrast ratio between two colors, from 1 to 21."""
    lum_1 = relative_luminance(first)
    lum_2 = relative_luminance(second)
    return (max(lum_1, lum_2) + 0.05) / (min(lum_1, lum_2) + 0.05)


def dominant_color(background: str) -> str:
    """
    The solid color text is read against on a background.

    A hex color is its own dominant color. For a gradient the lightest
    hex stop wins. Anything else is read as white.

    >>> dominant_color("linear-gradient(135deg, #000000 0%, #1e3a8a 100%)")
    '#1e3a8a'
    """
    stripped = background.strip()
    if _HEX_RE.match(stripped):
        return stripped
    if is_gradient(stripped):
        stops = _HEX_STOP_RE.findall(stripped)
        if stops:
            return max(stops, key=relative_luminance)
    return "#ffffff"


def optimal_text_color(background: str, preferred: str) -> str:
    """
    Text color that stays readable on a background.

    The preferred color is kept when its contrast against the dominant
    background color reaches CONTRAST_THRESHOLD. Otherwise dark
    backgrounds get white (or a light grey when white is still too close)
    and light backgrounds get black (or a near-black grey).

    Args:
        background: Solid color or gradient the text sits on
        preferred: Color the theme asked for

    Returns:
        ``preferred`` or one of the fixed fallback colors
    """
    base = dominant_color(background)
    if contrast_ratio(preferred, base) >= CONTRAST_THRESHOLD:
        return preferred
    if relative_luminance(base) < 0.5:
        return "#ffffff" if contrast_ratio("#ffffff", base) >= CONTRAST_THRESHOLD else "#f0f0f0"
    return "#000000" if contrast_ratio("#000000", base) >= CONTRAST_THRESHOLD else "#1a1a1a"


def is_gradient(value: str) -> bool:
    """
    Detect a gradient color value.

    String-based heuristic: gradients are always written as
    ``linear-gradient(...)``/``radial-gradient(...)``/``conic-gradient(...)``
    literals, so a case-insensitive substring test is sufficient. This is
    not a CSS parser.
    """
    return "gradient" in value.lower()


def text_color_declarations(value: str) -> list[str]:
    """
    Declarations applying a color to text.

    A solid color yields a single ``color`` declaration. A gradient uses
    the background-clip technique, ending with a transparent ``color`` so
    the gradient shows through.
    """
    if not is_gradient(value):
        return [f"color: {value};"]
    return [
        f"background-image: {value};",
        "background-clip: text;",
        "-webkit-background-clip: text;",
        "-webkit-text-fill-color: transparent;",
        "color: transparent;",
    ]


# =============================================================================
# Shadows
# =============================================================================


@dataclass(frozen=True)
class WidgetShadow:
    """Box-shadow values for a widget at rest and on hover."""

    effect: BorderEffect
    rest: str
    hover: str


def composite_shadow(
    effect: BorderEffect,
    shadow_intensity: ShadowIntensity,
    glow_color: str,
    glow_width: float,
    glow_opacity: float,
    level_1: str,
    level_2: str,
) -> WidgetShadow:
    """
    Build the widget box-shadow for exactly one branch.

    Shadow branch: the elevation preset picked by intensity (``none``,
    ``level_1`` for subtle, ``level_2`` for pronounced).

    Glow branch: ``level_1`` followed by ``0 0 <width>px <color>`` with
    the glow color at the given opacity.

    Args:
        effect: Which branch fires
        shadow_intensity: Elevation keyword for the shadow branch
        glow_color: Glow color (hex colors get the opacity applied)
        glow_width: Glow blur radius in px
        glow_opacity: Glow alpha in [0, 1]
        level_1: Low elevation shadow preset
        level_2: High elevation shadow preset

    Returns:
        WidgetShadow for the active branch
    """
    if effect is BorderEffect.GLOW:
        color = color_at_opacity(glow_color, glow_opacity)
        rest = f"{level_1}, 0 0 {format_number(glow_width)}px {color}"
        hover = f"{level_2}, 0 0 {format_number(glow_width * 1.5)}px {color}"
        return WidgetShadow(effect=effect, rest=rest, hover=hover)

    rest = {
        ShadowIntensity.NONE: "none",
        ShadowIntensity.SUBTLE: level_1,
        ShadowIntensity.PRONOUNCED: level_2,
    }[shadow_intensity]
    hover = HOVER_SHADOW[shadow_intensity] or level_2
    return WidgetShadow(effect=BorderEffect.SHADOW, rest=rest, hover=hover)


def title_text_shadow(
    effect: TextEffect,
    border_color: str,
    border_width: float,
    shadow_color: str,
    shadow_intensity: float,
    shadow_depth: float,
    shadow_blur: float,
    glow_color: str,
    glow_width: float,
) -> str:
    """
    Text-shadow for the page title.

    A non-zero border width draws an outline ring from eight offset
    shadows. A shadow effect adds one offset drop shadow; a glow effect
    adds three layers at 1x, 1.5x and 2x the glow width.

    Returns:
        Comma-joined text-shadow layers, or ``none``
    """
    layers: list[str] = []

    if border_width > 0:
        w = format_number(border_width)
        for dx, dy in (
            (w, "0"),
            (f"-{w}", "0"),
            ("0", w),
            ("0", f"-{w}"),
            (w, w),
            (f"-{w}", f"-{w}"),
            (w, f"-{w}"),
            (f"-{w}", w),
        ):
            layers.append(f"{_px(dx)} {_px(dy)} 0 {border_color}")

    if effect is TextEffect.SHADOW:
        color = color_at_opacity(shadow_color, shadow_intensity)
        depth = format_number(shadow_depth)
        layers.append(f"{depth}px {depth}px {format_number(shadow_blur)}px {color}")
    elif effect is TextEffect.GLOW and glow_width > 0:
        color = color_at_opacity(glow_color, 0.8)
        for factor in (1.0, 1.5, 2.0):
            layers.append(f"0 0 {format_number(glow_width * factor)}px {color}")

    return ", ".join(layers) if layers else "none"


def _px(value: str) -> str:
    return value if value == "0" else f"{value}px"


# =============================================================================
# Fonts and class names
# =============================================================================


def google_fonts_url(families: Iterable[str], weights: Iterable[int]) -> str | None:
    """
    Build one Google Fonts css2 URL for the given families.

    Families are de-duplicated (first occurrence wins, case-insensitive)
    and generic/system families are skipped. Spaces in family names are
    encoded as ``+``.

    Args:
        families: Family names in role order
        weights: Weight set requested for every family

    Returns:
        The URL, or None if no family needs loading
    """
    weight_spec = ";".join(str(w) for w in sorted(set(weights)))
    seen: set[str] = set()
    params: list[str] = []
    for family in families:
        name = family.strip()
        key = name.lower()
        if not name or key in seen or is_generic_family(name):
            continue
        seen.add(key)
        params.append(f"family={quote_plus(name)}:wght@{weight_spec}")

    if not params:
        return None
    return f"{GOOGLE_FONTS_BASE}?{'&'.join(params)}&display=swap"


def theme_class(name: str | None) -> str | None:
    """
    Slug a theme name into a ``theme-<slug>`` class.

    >>> theme_class("Aurora Borealis!!")
    'theme-aurora-borealis'
    >>> theme_class("???") is None
    True
    """
    if not name:
        return None
    slug = _SLUG_RE.sub("-", name.strip().lower()).strip("-")
    return f"theme-{slug}" if slug else None


def is_finite_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
