"""Style and StyleMap resolution for KML conversion.

Responsibilities:
- Decode KML ``aabbggrr`` colors into ``RgbaColor``
- Parse ``<Style>`` blocks into ``Style`` values
- Build the per-document style table: ``Style`` ids first, then
  ``StyleMap`` ids forwarded through their ``normal`` pair
- Resolve a Placemark ``styleUrl`` against the table

The table is a plain ``dict`` built fresh for each document and dropped
when the conversion returns.
"""

from __future__ import annotations

import logging
import math
import re
from typing import TYPE_CHECKING

from cable_ingest.converters.kml._constants import KML_NAMESPACE
from cable_ingest.converters.kml._validation import (
    find_all,
    find_child,
    find_first,
    first_text,
    local_name,
    text_of,
)
from cable_ingest.models.style import RgbaColor, Style

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger("cable_ingest.converters.kml")

_ABGR_PATTERN = re.compile(r"^[0-9a-fA-F]{8}$")

_STYLE_TAGS = frozenset({"Style", "CascadingStyle"})

# ---------------------------------------------------------------------------
# Color decoding
# ---------------------------------------------------------------------------


def abgr_to_rgba(value: str | None) -> RgbaColor | None:
    """Decode a KML ``aabbggrr`` hex color.

    Alpha becomes ``byte / 255`` rounded to 2 decimals; red, green and
    blue are read from the remaining bytes in reverse order.

    >>> str(abgr_to_rgba("ff0000ff"))
    'rgba(255, 0, 0, 1.00)'

    Returns:
        The decoded color, or ``None`` when *value* is not 8 hex digits.
    """
    if not value:
        return None
    text = value.strip().lstrip("#")
    if not _ABGR_PATTERN.match(text):
        logger.debug("Ignoring malformed KML color %r", value)
        return None

    alpha = int(text[0:2], 16)
    blue = int(text[2:4], 16)
    green = int(text[4:6], 16)
    red = int(text[6:8], 16)
    return RgbaColor(r=red, g=green, b=blue, a=round(alpha / 255, 2))


def _parse_float(text: str) -> float | None:
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        logger.debug("Ignoring non-numeric style value %r", text)
        return None
    return value if math.isfinite(value) else None


# ---------------------------------------------------------------------------
# Style parsing
# ---------------------------------------------------------------------------


def parse_style(style_elem: _Element) -> Style:
    """Extract line, polygon, icon and label properties from a ``<Style>``."""
    line_color = poly_color = icon_color = label_color = None
    line_width = icon_scale = label_scale = None
    icon_href = None

    line_style = find_child(style_elem, "LineStyle")
    if line_style is not None:
        line_color = abgr_to_rgba(first_text(line_style, "color"))
        line_width = _parse_float(first_text(line_style, "width"))

    poly_style = find_child(style_elem, "PolyStyle")
    if poly_style is not None:
        poly_color = abgr_to_rgba(first_text(poly_style, "color"))

    icon_style = find_child(style_elem, "IconStyle")
    if icon_style is not None:
        icon_color = abgr_to_rgba(first_text(icon_style, "color"))
        icon_scale = _parse_float(first_text(icon_style, "scale"))
        icon = find_first(icon_style, "Icon")
        if icon is not None:
            icon_href = first_text(icon, "href") or None

    label_style = find_child(style_elem, "LabelStyle")
    if label_style is not None:
        label_color = abgr_to_rgba(first_text(label_style, "color"))
        label_scale = _parse_float(first_text(label_style, "scale"))

    return Style(
        line_color=line_color,
        line_opacity=line_color.a if line_color else None,
        line_width=line_width,
        polygon_color=poly_color,
        polygon_opacity=poly_color.a if poly_color else None,
        icon_color=icon_color,
        icon_scale=icon_scale,
        icon_href=icon_href,
        label_color=label_color,
        label_scale=label_scale,
    )


# ---------------------------------------------------------------------------
# Style table
# ---------------------------------------------------------------------------


def _style_id(element: _Element) -> str:
    # gx:CascadingStyle carries its id as kml:id
    return element.get("id") or element.get(f"{{{KML_NAMESPACE}}}id") or ""


def style_url_fragment(url: str) -> str:
    """Return the id a ``styleUrl`` points at (text after ``#``)."""
    return url.strip().rsplit("#", 1)[-1]


def build_style_table(root: _Element) -> dict[str, Style]:
    """Map every style id and StyleMap id in the document to a ``Style``.

    Only the StyleMap pair keyed ``normal`` is followed. A pair may
    reference a style by ``styleUrl`` or embed one inline. StyleMaps
    whose ``normal`` pair cannot be resolved are left out.
    """
    table: dict[str, Style] = {}

    for element in root.iter():
        if local_name(element) not in _STYLE_TAGS:
            continue
        style_id = _style_id(element)
        if style_id:
            table[style_id] = parse_style(element)

    for style_map in find_all(root, "StyleMap"):
        map_id = style_map.get("id")
        if not map_id:
            continue
        for pair in style_map:
            if local_name(pair) != "Pair" or text_of(find_child(pair, "key")) != "normal":
                continue
            url = text_of(find_child(pair, "styleUrl"))
            if url and style_url_fragment(url) in table:
                table[map_id] = table[style_url_fragment(url)]
            else:
                inline = find_child(pair, "Style")
                if inline is not None:
                    table[map_id] = parse_style(inline)
            break

    logger.debug("Style table built | entries=%d", len(table))
    return table


def resolve_style_url(url: str, table: dict[str, Style]) -> Style | None:
    """Look up a ``styleUrl`` in the style table.

    Returns:
        The resolved style, or ``None`` for a blank or unknown reference.
    """
    if not url.strip():
        return None
    return table.get(style_url_fragment(url))
