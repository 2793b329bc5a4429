"""Heuristic soil classification for cable routes.

Survey crews mark soil conditions either in the Placemark text
("Galian Pasir", "Area Batuan Keras") or by line color. Classification
tries, in order:

1. keywords in the Placemark name
2. keywords in the Placemark description
3. color bucket of the resolved line color, then icon color
4. the default soil type (Tanah Liat)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cable_ingest.core.constants import (
    BATUAN,
    DEFAULT_SOIL_KEYWORDS,
    PASIR,
    TANAH_LIAT,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from cable_ingest.core.config import IngestConfig
    from cable_ingest.models.style import RgbaColor, Style

logger = logging.getLogger("cable_ingest.converters.kml")

_TANAH_WORD = re.compile(r"\btanah\b")

# Spread between the largest and smallest channel that still counts as grey
GREY_TOLERANCE = 40


@dataclass(frozen=True, slots=True)
class ColorRule:
    """Maps colors satisfying ``matches`` to ``soil_type``."""

    soil_type: str
    matches: Callable[[RgbaColor], bool]


def _is_sand(c: RgbaColor) -> bool:
    return c.r > 200 and c.g > 180 and c.b < 100


def _is_clay(c: RgbaColor) -> bool:
    return c.r > 180 and c.g < 100 and c.b < 100


def _is_rock(c: RgbaColor) -> bool:
    spread = max(c.r, c.g, c.b) - min(c.r, c.g, c.b)
    return spread <= GREY_TOLERANCE and c.r < 150


DEFAULT_COLOR_RULES: tuple[ColorRule, ...] = (
    ColorRule(PASIR, _is_sand),
    ColorRule(TANAH_LIAT, _is_clay),
    ColorRule(BATUAN, _is_rock),
)


class SoilClassifier:
    """Classify a Placemark into one of the configured soil types.

    Args:
        keywords: Ordered ``(soil_type, keywords)`` pairs. Matching is a
            case-insensitive substring test; the first pair with a hit wins.
        color_rules: Ordered color rules applied when no keyword matches.
        default: Soil type returned when nothing matches.
    """

    def __init__(
        self,
        keywords: tuple[tuple[str, tuple[str, ...]], ...] = DEFAULT_SOIL_KEYWORDS,
        color_rules: tuple[ColorRule, ...] = DEFAULT_COLOR_RULES,
        default: str = TANAH_LIAT,
    ) -> None:
        self._keywords = tuple(
            (soil_type, tuple(k.lower() for k in words)) for soil_type, words in keywords
        )
        self._color_rules = color_rules
        self.default = default

    @classmethod
    def from_config(cls, config: IngestConfig) -> SoilClassifier:
        return cls(keywords=config.soil_keywords)

    def match_text(self, text: str) -> str | None:
        """Return the soil type named in *text*, or ``None``."""
        lowered = text.lower()
        if not lowered.strip():
            return None
        for soil_type, words in self._keywords:
            if any(word in lowered for word in words):
                return soil_type
        # "batuan" contains "batu", so a bare "tanah" only means clay
        # when the text does not also talk about rock
        if _TANAH_WORD.search(lowered) and "batuan" not in lowered:
            return TANAH_LIAT
        return None

    def match_color(self, color: RgbaColor | None) -> str | None:
        """Return the soil type whose color bucket holds *color*, or ``None``."""
        if color is None:
            return None
        for rule in self._color_rules:
            if rule.matches(color):
                return rule.soil_type
        return None

    def classify(self, name: str = "", description: str = "", style: Style | None = None) -> str:
        """Classify by name, then description, then style color, then default."""
        by_name = self.match_text(name)
        if by_name:
            return by_name

        by_description = self.match_text(description)
        if by_description:
            return by_description

        if style is not None:
            for color in (style.line_color, style.icon_color):
                by_color = self.match_color(color)
                if by_color:
                    return by_color

        logger.debug("No soil hint for %r; defaulting to %s", name, self.default)
        return self.default
