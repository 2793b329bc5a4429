"""Data model for resolved KML visual styles.

KML stores colors as ``aabbggrr`` hex. They are decoded once, when the
style table is built, into ``RgbaColor`` values so that consumers never
deal with the reversed byte order.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RgbaColor:
    """A decoded color.

    Attributes:
        r: Red channel, 0-255.
        g: Green channel, 0-255.
        b: Blue channel, 0-255.
        a: Alpha, 0-1, rounded to 2 decimals.
    """

    r: int
    g: int
    b: int
    a: float = 1.0

    def __str__(self) -> str:
        return f"rgba({self.r}, {self.g}, {self.b}, {self.a:.2f})"

    def as_tuple(self) -> tuple[int, int, int, float]:
        return (self.r, self.g, self.b, self.a)


@dataclass(frozen=True, slots=True)
class Style:
    """Concrete visual properties of a Placemark.

    Every attribute is optional; ``None`` means the KML did not set it.
    Opacities equal the alpha of the matching color.
    """

    line_color: RgbaColor | None = None
    line_opacity: float | None = None
    line_width: float | None = None
    polygon_color: RgbaColor | None = None
    polygon_opacity: float | None = None
    icon_color: RgbaColor | None = None
    icon_scale: float | None = None
    icon_href: str | None = None
    label_color: RgbaColor | None = None
    label_scale: float | None = None

    @property
    def is_empty(self) -> bool:
        """Whether no property is set."""
        return all(getattr(self, name) is None for name in self.__slots__)

    def to_dict(self) -> dict[str, object]:
        """Serialise the set properties using camelCase keys."""
        values: dict[str, object] = {
            "lineColor": self.line_color,
            "lineOpacity": self.line_opacity,
            "lineWidth": self.line_width,
            "polygonColor": self.polygon_color,
            "polygonOpacity": self.polygon_opacity,
            "iconColor": self.icon_color,
            "iconScale": self.icon_scale,
            "iconHref": self.icon_href,
            "labelColor": self.label_color,
            "labelScale": self.label_scale,
        }
        return {
            key: str(value) if isinstance(value, RgbaColor) else value
            for key, value in values.items()
            if value is not None
        }
