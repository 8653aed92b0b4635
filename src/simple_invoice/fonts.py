"""Font selection: fallback font for out-of-range characters and transliteration."""

import logging
from typing import Iterable, Tuple

from unidecode import unidecode

from .config import CodepointRange, FontsStyle
from .layout_engine import FontLoadState


logger = logging.getLogger(__name__)


def is_in_range(char: str, ranges: Iterable[CodepointRange]) -> bool:
    """True if the character's codepoint falls inside one of the inclusive ranges."""
    codepoint = ord(char)
    return any(first <= codepoint <= last for first, last in ranges)


def has_unsupported(text: str, ranges: Iterable[CodepointRange]) -> bool:
    """True if any character of text is outside every range."""
    ranges = tuple(ranges)
    return any(not is_in_range(char, ranges) for char in text or "")


class FontResolver:
    """Picks font names for text values and registers fonts with the backend on demand."""

    def __init__(self, fonts: FontsStyle, backend, load_state: FontLoadState):
        self.fonts = fonts
        self.backend = backend
        self.load_state = load_state

    def supported_range(self, weight: str) -> Tuple[CodepointRange, ...]:
        """Codepoints the font for weight can show; bold defaults to the normal range."""
        spec = self.fonts.for_weight(weight)
        if spec.supported is not None:
            return spec.supported
        return self.fonts.normal.supported

    def load_custom_fonts(self) -> None:
        """Register the normal and bold fonts when they come from files."""
        for spec in (self.fonts.normal, self.fonts.bold):
            if spec.path:
                self.backend.register_font(spec.name, spec.path)

    def resolve_font(self, weight: str, text: str) -> str:
        """
        Return the font name to draw text with.

        The fallback font is used only when the text has characters the
        font for weight lacks and the fallback font covers all of them.
        """
        fallback = self.fonts.fallback
        primary = self.fonts.for_weight(weight).name

        if not fallback.enabled:
            return primary

        if not has_unsupported(text, self.supported_range(weight)):
            return primary

        # Fallback can't help either
        if has_unsupported(text, fallback.supported):
            return primary

        if not self.load_state.fallback_loaded:
            self.backend.register_font(fallback.name, fallback.path)
            self.load_state.fallback_loaded = True

        logger.debug("Using fallback font %s for %r", fallback.name, text)
        return fallback.name

    def normalize_text(self, text: str) -> str:
        """Transliterate text containing characters the fallback font cannot show."""
        fallback = self.fonts.fallback
        if not fallback.enabled or not fallback.transliterate:
            return text

        if not has_unsupported(text, fallback.supported):
            return text

        transliterated = unidecode(text)
        logger.debug("Transliterated %r to %r", text, transliterated)
        return transliterated
