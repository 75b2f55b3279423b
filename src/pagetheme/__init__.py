"""
pagetheme - theme token resolution and stylesheet generation.

Turns a theme (nested design token groups plus legacy flat fields) and a
page's overrides into one deterministic, injection-safe CSS payload, a
body class and a Google Fonts URL.
"""

from __future__ import annotations

from ._version import get_version
from .errors import IncompleteTokensError, PageThemeError, ThemeConfigError
from .specs import PageOverrides, ResolvedTokens, Theme
from .themes import (
    DEFAULT_ENGINE_CONFIG,
    EngineConfig,
    StylesheetOutput,
    emit,
    load_engine_config,
    render_head,
    render_theme,
    resolve,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "Theme",
    "PageOverrides",
    "ResolvedTokens",
    "EngineConfig",
    "DEFAULT_ENGINE_CONFIG",
    "load_engine_config",
    "resolve",
    "emit",
    "render_theme",
    "render_head",
    "StylesheetOutput",
    "PageThemeError",
    "ThemeConfigError",
    "IncompleteTokensError",
]
