"""
Unit tests for the stylesheet emitter.
"""

import logging
import re

import pytest

from pagetheme.errors import IncompleteTokensError
from pagetheme.specs import PageOverrides, Theme
from pagetheme.themes import DEFAULT_ENGINE_CONFIG, emit, render_theme, resolve
from pagetheme.themes.css_generator import StylesheetOutput


def _root_block(css: str) -> str:
    match = re.search(r":root \{\n(.*?)\n\}", css, re.DOTALL)
    assert match is not None
    return match.group(1)


def _root_properties(css: str) -> dict[str, str]:
    properties = {}
    for line in _root_block(css).splitlines():
        name, _, value = line.strip().partition(": ")
        properties[name] = value.rstrip(";")
    return properties


class TestRootBlock:
    """Tests for the :root custom property block."""

    def test_defaults_emit_full_block(self):
        output = render_theme(None)
        properties = _root_properties(output.css)
        assert properties["--color-accent-primary"] == "#0066ff"
        assert properties["--page-background"] == DEFAULT_ENGINE_CONFIG.color_tokens.background.base
        assert properties["--font-family-heading"] == "'Inter', sans-serif"
        assert properties["--space-md"] == "1rem"
        assert properties["--type-weight-bold"] == "600"
        assert properties["--layout-density"] == "comfortable"
        assert all(value for value in properties.values())

    def test_every_line_is_a_declaration(self, cyberpunk_theme):
        for line in _root_block(render_theme(cyberpunk_theme).css).splitlines():
            assert re.fullmatch(r"  --[a-z0-9-]+: [^;{}]+;", line), line

    def test_fixed_order(self, cyberpunk_theme, legacy_theme):
        """Test that property order does not depend on the input."""
        first = list(_root_properties(render_theme(cyberpunk_theme).css))
        second = list(_root_properties(render_theme(legacy_theme).css))
        assert first == second
        assert first[0] == "--color-background-frame"
        assert first[-1] == "--page-title-text-shadow"

    def test_compact_spacing(self):
        output = render_theme(None, PageOverrides(layout_density="compact"))
        assert "  --space-md: 0.75rem;" in output.css

    def test_accent_override(self):
        """Test the null-theme scenario end to end."""
        output = render_theme(None, PageOverrides(custom_accent_color="#123456"))
        assert "  --color-accent-primary: #123456;" in output.css
        assert output.css.startswith(":root {\n")


class TestContrastProperties:
    """Tests for contrast-corrected text colors in the stylesheet."""

    def test_on_colors_emitted(self):
        properties = _root_properties(render_theme(None).css)
        assert properties["--color-text-on-background"] == "#111827"
        assert properties["--color-text-on-surface"] == "#111827"
        assert properties["--color-text-on-surface-raised"] == "#111827"
        assert properties["--color-text-on-accent"] == "#ffffff"
        assert properties["--color-text-state-success"] == "#0f5132"
        assert properties["--color-text-state-warning"] == "#7c2d12"
        assert properties["--color-text-state-danger"] == "#7f1d1d"

    def test_dark_page_corrects_heading(self):
        css = render_theme(None, PageOverrides(custom_page_background="#101010")).css
        properties = _root_properties(css)
        assert properties["--color-text-on-background"] == "#ffffff"
        assert properties["--heading-font-color"] == "#ffffff"
        assert "h1, h2, h3, .page-title {\n  color: #ffffff;\n}" in css


class TestIconProperties:
    """Tests for icon custom properties and the social icon rules."""

    def test_defaults(self):
        properties = _root_properties(render_theme(None).css)
        assert properties["--icon-size"] == "48px"
        assert properties["--icon-spacing"] == "0.75rem"
        assert properties["--icon-color"] == "#0066ff"
        assert properties["--social-icon-color"] == "#0066ff"

    def test_theme_icons(self):
        theme = Theme.model_validate(
            {"iconography_tokens": {"size": 36, "color": "#ff0000", "spacing": 1.25}}
        )
        properties = _root_properties(render_theme(theme).css)
        assert properties["--icon-size"] == "36px"
        assert properties["--icon-color"] == "#ff0000"
        assert properties["--icon-spacing"] == "1.25rem"

    def test_social_icon_rules(self):
        css = render_theme(None).css
        assert "body .social-icon {\n  color: var(--icon-color);" in css
        assert "  font-size: calc(var(--icon-size) * 0.625);" in css
        assert ".social-icons {\n  gap: var(--icon-spacing);\n}" in css
        assert "body .social-icon:hover {\n  opacity: 0.8;\n}" in css

    def test_inactive_theme_emits_defaults(self, cyberpunk_row):
        theme = Theme.from_row({**cyberpunk_row, "is_active": False})
        output = render_theme(theme)
        assert output == render_theme(None)
        assert output.body_class == ""


class TestIdempotence:
    def test_emit_twice_identical(self, cyberpunk_theme):
        tokens = resolve(cyberpunk_theme, PageOverrides(custom_accent_color="#123456"))
        assert emit(tokens).css == emit(tokens).css

    def test_render_twice_identical(self, aurora_theme):
        assert render_theme(aurora_theme) == render_theme(aurora_theme)


class TestWidgetShadow:
    """Tests for shadow branch exclusivity in the emitted CSS."""

    def test_glow_theme(self, cyberpunk_theme):
        tokens = resolve(cyberpunk_theme)
        properties = _root_properties(emit(tokens).css)
        assert properties["--widget-box-shadow"] == (
            f"{tokens.shadow_level_1}, 0 0 12px rgba(0, 245, 255, 0.6)"
        )
        assert properties["--widget-box-shadow"] != tokens.shadow_level_1
        assert "@keyframes glow-pulse" in emit(tokens).css

    def test_shadow_theme(self, aurora_theme):
        tokens = resolve(aurora_theme)
        css = emit(tokens).css
        properties = _root_properties(css)
        assert properties["--widget-box-shadow"] == tokens.shadow_level_2
        assert "0 0 8px" not in properties["--widget-box-shadow"]
        assert "@keyframes glow-pulse" not in css

    def test_glow_widget_is_positioned(self, cyberpunk_theme):
        assert "position: relative;" in render_theme(cyberpunk_theme).css
        assert "position: relative;" not in render_theme(None).css


class TestGradientText:
    """Tests for gradient-aware text color rules."""

    def test_gradient_heading(self, aurora_theme):
        css = render_theme(aurora_theme).css
        assert "background-clip: text;" in css
        assert "color: transparent;" in css
        assert "background-image: linear-gradient(90deg, #22d3ee 0%, #a78bfa 100%);" in css

    def test_solid_heading(self):
        theme = Theme.model_validate({"typography_tokens": {"color": {"heading": "#FF0000"}}})
        css = render_theme(theme).css
        assert "h1, h2, h3, .page-title {\n  color: #FF0000;\n}" in css
        assert "background-clip" not in css

    def test_gradient_page_background_not_fixed(self, cyberpunk_theme):
        css = render_theme(cyberpunk_theme).css
        body = css[css.index("\nbody {") :]
        body = body[: body.index("}")]
        assert "background-attachment" not in body

    def test_solid_page_background_fixed(self):
        assert "background-attachment: fixed;" in render_theme(None).css


class TestOutputClasses:
    """Tests for body class, effect classes and the fonts URL."""

    def test_theme_and_spatial_class(self, aurora_theme):
        output = render_theme(aurora_theme)
        assert output.theme_class == "theme-aurora-borealis"
        assert output.spatial_effect_class == "spatial-glass"
        assert output.body_class == "spatial-glass theme-aurora-borealis"
        assert "body.spatial-glass {" in output.css

    def test_header_comment_uses_slug(self, aurora_theme):
        css = render_theme(aurora_theme).css
        assert css.startswith("/* pagetheme: theme-aurora-borealis */\n\n:root {")

    def test_no_theme_no_classes(self):
        output = render_theme(None)
        assert output.body_class == ""
        assert output.theme_class is None
        assert output.spatial_effect_class is None

    def test_symbol_name_no_class(self):
        output = render_theme(Theme(name="???"))
        assert output.theme_class is None
        assert "theme-" not in output.body_class

    def test_effect_classes(self):
        output = render_theme(None, PageOverrides(page_name_effect="sparkles"))
        assert output.page_title_class == "page-title-effect-sparkles"
        assert output.featured_class == "featured-effect-jiggle"
        assert "@keyframes fx-sparkles" in output.css
        assert "@keyframes fx-jiggle" in output.css
        assert ".page-title-effect-sparkles {" in output.css
        assert ".featured-widget.featured-effect-jiggle {" in output.css

    def test_shared_keyframes_emitted_once(self):
        page = PageOverrides(page_name_effect="pulse", featured_effect="pulse")
        output = render_theme(None, page)
        assert output.css.count("@keyframes fx-pulse") == 1

    def test_effects_none(self):
        output = render_theme(None, PageOverrides(featured_effect="none"))
        assert output.page_title_class is None
        assert output.featured_class is None
        assert "@keyframes fx-" not in output.css

    def test_fonts_url_dedup(self, aurora_theme):
        output = render_theme(aurora_theme)
        assert output.fonts_url is not None
        assert output.fonts_url.count("family=Inter:") == 1

    def test_fonts_url_roles(self, cyberpunk_theme):
        url = render_theme(cyberpunk_theme).fonts_url
        assert url == (
            "https://fonts.googleapis.com/css2"
            "?family=Orbitron:wght@400;600;700&family=Rajdhani:wght@400;600;700&display=swap"
        )

    def test_generic_font_unquoted(self):
        theme = Theme.model_validate({"fonts": {"heading": "serif", "body": "monospace"}})
        output = render_theme(theme)
        assert "  --font-family-heading: serif;" in output.css
        assert output.fonts_url is None

    def test_output_is_frozen_model(self):
        assert isinstance(render_theme(None), StylesheetOutput)


class TestSafety:
    """Values are re-checked at emission."""

    def test_unsafe_value_replaced(self, caplog):
        tokens = resolve(None).model_copy(
            update={"color_accent_primary": "red;}</style><script>alert(1)</script>"}
        )
        with caplog.at_level(logging.WARNING, logger="pagetheme.themes.css_generator"):
            css = emit(tokens).css
        assert "</style>" not in css
        assert "<script>" not in css
        assert "  --color-accent-primary: #0066ff;" in css
        assert "color_accent_primary" in caplog.text

    def test_unsafe_font_replaced(self):
        tokens = resolve(None).model_copy(update={"font_heading": "Inter', x"})
        assert "  --font-family-heading: 'Inter', sans-serif;" in emit(tokens).css

    def test_unknown_keyword_replaced(self):
        tokens = resolve(None).model_copy(update={"spatial_effect": "wobble"})
        output = emit(tokens)
        assert output.spatial_effect_class is None

    def test_negative_number_replaced(self):
        tokens = resolve(None).model_copy(update={"space_md": -3.0})
        assert "  --space-md: 1rem;" in emit(tokens).css

    def test_theme_data_never_breaks_out(self):
        """Test that hostile theme data cannot reach the stylesheet."""
        hostile = "#fff;} body { display: none"
        theme = Theme.model_validate(
            {
                "name": "</style><script>",
                "color_tokens": {"accent": {"primary": hostile}, "text": {"primary": "red\n}"}},
                "page_background": "url(javascript:alert(1))",
                "fonts": {"heading": "Evil'}; x"},
            }
        )
        css = render_theme(theme).css
        assert hostile not in css
        assert "javascript" not in css
        assert "</style>" not in css
        assert "Evil" not in css

    @pytest.mark.parametrize("slot", ["color_accent_primary", "corner_md", "widget_gap"])
    def test_empty_slot_raises(self, slot):
        tokens = resolve(None).model_copy(update={slot: ""})
        with pytest.raises(IncompleteTokensError) as exc_info:
            emit(tokens)
        assert exc_info.value.slot == slot

    def test_none_slot_raises(self):
        tokens = resolve(None).model_copy(update={"font_body": None})
        with pytest.raises(IncompleteTokensError):
            emit(tokens)
