"""
Theme specification types.

This module exports the token schema, the keyword enums and the
resolved token set.
"""

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
from pagetheme.specs.theme import (
    ColorTokens,
    IconographyTokens,
    LegacyColors,
    LegacyFonts,
    MotionTokens,
    PageOverrides,
    ShapeTokens,
    SpacingScale,
    SpacingTokens,
    Theme,
    TypographyTokens,
    WidgetStyles,
)

__all__ = [
    # Schema
    "Theme",
    "PageOverrides",
    "ColorTokens",
    "TypographyTokens",
    "SpacingTokens",
    "SpacingScale",
    "ShapeTokens",
    "MotionTokens",
    "IconographyTokens",
    "LegacyColors",
    "LegacyFonts",
    "WidgetStyles",
    # Keywords
    "BorderEffect",
    "Density",
    "FeaturedEffect",
    "GlowIntensity",
    "PageNameEffect",
    "ShadowIntensity",
    "SpatialEffect",
    "TextEffect",
    "WidgetShape",
    "WidgetSpacing",
    "match_keyword",
    "parse_keyword",
    # Resolution output
    "ResolvedTokens",
]
