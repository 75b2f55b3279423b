"""
Error types for theme resolution and stylesheet emission.

Bad theme or page data never raises: malformed and unsafe tokens fall
through to the next precedence layer. Only configuration problems and
programming-contract violations surface as exceptions.
"""

from __future__ import annotations


class PageThemeError(Exception):
    """Base exception for all pagetheme errors."""

    def __init__(self, message: str, slot: str | None = None):
        self.message = message
        self.slot = slot
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with the offending slot if available."""
        if self.slot:
            return f"{self.slot}: {self.message}"
        return self.message


class ThemeConfigError(PageThemeError):
    """
    Raised when the engine configuration is unusable.

    Examples:
    - Built-in default missing for a token slot
    - Density multiplier table without a comfortable entry
    - Config file that is not valid TOML
    """

    pass


class IncompleteTokensError(PageThemeError):
    """
    Raised when the emitter is handed a token set with an empty slot.

    Resolution always fills every slot, so this indicates a caller that
    built or mutated ResolvedTokens by hand.
    """

    pass
