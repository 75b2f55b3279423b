"""
Head fragment rendering.

Wraps a StylesheetOutput in the markup that goes into the page
``<head>``: font preconnect hints, the Google Fonts stylesheet link and
the theme ``<style>`` block. The page renderer places the fragment
before its own stylesheet links so those can still override the theme.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from .css_generator import StylesheetOutput

TEMPLATES_DIR = Path(__file__).parent / "templates"

_env: Environment | None = None


def create_jinja_env() -> Environment:
    """Create the Jinja2 environment for theme fragments."""
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def get_jinja_env() -> Environment:
    """Get the shared Jinja2 environment (lazy singleton)."""
    global _env
    if _env is None:
        _env = create_jinja_env()
    return _env


def render_head(output: StylesheetOutput, style_id: str = "pagetheme") -> Markup:
    """
    Render the ``<head>`` fragment for an emitted stylesheet.

    The CSS is inserted verbatim; every value in it was checked for
    CSS safety at emission. The fonts URL is attribute-escaped.

    Args:
        output: Result of ``emit`` or ``render_theme``
        style_id: id attribute for the style element

    Returns:
        Markup safe to place in a template without further escaping
    """
    template = get_jinja_env().get_template("theme_head.html")
    html = template.render(
        css=Markup(output.css),
        fonts_url=output.fonts_url,
        style_id=style_id,
    )
    return Markup(html)
