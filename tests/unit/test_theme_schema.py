"""
Unit tests for the theme token schema and keyword enums.
"""

import pytest
from pydantic import ValidationError

from pagetheme.specs import (
    ColorTokens,
    Density,
    FeaturedEffect,
    PageOverrides,
    SpacingScale,
    SpacingTokens,
    Theme,
    WidgetShape,
    match_keyword,
    parse_keyword,
)


class TestKeywords:
    """Tests for keyword matching."""

    def test_exact_match(self):
        assert match_keyword(Density, "compact") is Density.COMPACT

    def test_case_and_whitespace_ignored(self):
        """Test that keyword matching normalizes input."""
        assert match_keyword(WidgetShape, "  Rounded ") is WidgetShape.ROUNDED

    def test_underscore_accepted_for_hyphen(self):
        assert match_keyword(FeaturedEffect, "rotating_glow") is FeaturedEffect.ROTATING_GLOW

    def test_member_passes_through(self):
        assert match_keyword(Density, Density.COMFORTABLE) is Density.COMFORTABLE

    @pytest.mark.parametrize("value", ["cozy", "", "   ", None, 3, ["compact"]])
    def test_unknown_is_none(self, value):
        """Test that unknown or non-string values do not match."""
        assert match_keyword(Density, value) is None

    def test_parse_keyword_default(self):
        assert parse_keyword(Density, "cozy", Density.COMFORTABLE) is Density.COMFORTABLE
        assert parse_keyword(Density, "COMPACT", Density.COMFORTABLE) is Density.COMPACT


class TestLenientParsing:
    """Tests for malformed-field tolerance."""

    def test_malformed_slot_dropped_siblings_kept(self):
        """Test that one bad slot does not hide the others."""
        tokens = ColorTokens.model_validate(
            {"text": {"primary": "#111111", "secondary": {"nested": "oops"}}}
        )
        assert tokens.text.primary == "#111111"
        assert tokens.text.secondary is None

    def test_group_of_wrong_shape_is_empty(self):
        """Test that a list where a mapping is expected counts as absent."""
        tokens = ColorTokens.model_validate({"accent": ["#fff"], "text": {"primary": "#000"}})
        assert tokens.accent.primary is None
        assert tokens.text.primary == "#000"

    def test_json_text_decoded(self):
        tokens = ColorTokens.model_validate('{"accent": {"primary": "#38bdf8"}}')
        assert tokens.accent.primary == "#38bdf8"

    def test_invalid_json_is_empty(self):
        tokens = ColorTokens.model_validate("{not json")
        assert tokens == ColorTokens()

    def test_blank_strings_are_absent(self):
        page = PageOverrides.model_validate({"custom_accent_color": "   "})
        assert page.custom_accent_color is None

    def test_values_are_stripped(self):
        page = PageOverrides.model_validate({"custom_accent_color": " #123456 "})
        assert page.custom_accent_color == "#123456"

    def test_numeric_strings_coerced(self):
        scale = SpacingScale.model_validate({"md": "1.25"})
        assert scale.md == 1.25

    def test_non_numeric_scale_dropped(self):
        scale = SpacingScale.model_validate({"md": "large", "lg": 1.5})
        assert scale.md is None
        assert scale.lg == 1.5

    def test_models_are_frozen(self):
        theme = Theme(name="Frozen")
        with pytest.raises(ValidationError):
            theme.name = "Thawed"  # type: ignore[misc]


class TestSpacingScale:
    """Tests for the 2xs..2xl slot aliases."""

    def test_aliases(self):
        scale = SpacingScale.model_validate({"2xs": 0.25, "2xl": 3.0})
        assert scale.get("2xs") == 0.25
        assert scale.get("2xl") == 3.0
        assert scale.get("md") is None

    def test_density_multiplier_tables(self):
        tokens = SpacingTokens.model_validate(
            {"density_multipliers": {"compact": {"md": 0.75}}, "vertical_spacing": 24}
        )
        assert tokens.density_multipliers["compact"].md == 0.75
        assert tokens.vertical_spacing == 24


class TestTheme:
    """Tests for Theme construction."""

    def test_from_row_nested(self, cyberpunk_theme):
        """Test a theme whose groups arrive already decoded."""
        assert cyberpunk_theme.name == "Cyberpunk Neon"
        assert cyberpunk_theme.color_tokens.accent.primary == "#00F5FF"
        assert cyberpunk_theme.typography_tokens.font.heading == "Orbitron"
        assert cyberpunk_theme.spacing_tokens.base_scale.get("2xl") == 2.6
        assert cyberpunk_theme.widget_styles.glow_width == 12

    def test_from_row_json_text(self, aurora_theme):
        """Test a theme whose groups arrive as JSON text."""
        assert aurora_theme.color_tokens.accent.primary == "#38bdf8"
        assert aurora_theme.spacing_tokens.density == "cozy"
        assert aurora_theme.shape_tokens == Theme().shape_tokens
        assert aurora_theme.motion_tokens == Theme().motion_tokens

    def test_iconography_tokens(self):
        """Test that icon sizes may be numbers or lengths, and JSON text."""
        theme = Theme.model_validate(
            {"iconography_tokens": '{"size": 40, "color": "#ff0000", "spacing": "1rem"}'}
        )
        assert theme.iconography_tokens.size == 40
        assert theme.iconography_tokens.color == "#ff0000"
        assert theme.iconography_tokens.spacing == "1rem"

    def test_text_state_group(self):
        tokens = ColorTokens.model_validate({"text_state": {"danger": "#7f1d1d", "success": 5}})
        assert tokens.text_state.danger == "#7f1d1d"
        assert tokens.text_state.success is None

    def test_legacy_colors_alias(self, legacy_theme):
        """Test that the stored 'colors' column maps to legacy_colors."""
        assert legacy_theme.legacy_colors.accent == "#e11d48"
        assert legacy_theme.fonts.heading == "Playfair Display"

    def test_legacy_border_width_number(self, legacy_theme):
        assert legacy_theme.widget_styles.border_width == 2

    def test_unknown_columns_ignored(self):
        theme = Theme.model_validate({"name": "X", "created_at": "2024-01-01", "user_id": 9})
        assert theme.name == "X"

    def test_non_mapping_row_is_empty(self):
        assert Theme.model_validate(42) == Theme()
