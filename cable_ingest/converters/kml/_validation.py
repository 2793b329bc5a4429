"""Document parsing and validation helpers for KML conversion.

Responsibilities:
- Parse KML text into an lxml element tree (fatal on malformed XML)
- Namespace-agnostic element lookup (KML exports with and without
  the 2.2 namespace are both common)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cable_ingest.converters.kml._constants import KML_NAMESPACE
from cable_ingest.core.exceptions import ValidationError

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger("cable_ingest.converters.kml")


# ---------------------------------------------------------------------------
# Exceptions (public API, re-exported from __init__)
# ---------------------------------------------------------------------------


class KmlParseError(ValidationError):
    """Raised when a KML document is not well-formed XML."""

    default_stage = "convert_kml"
    default_code = "KML_PARSE_FAILED"


class KmlValidationError(KmlParseError):
    """Raised when a single Placemark holds unusable data.

    Caught per Placemark by the converter; never escapes ``convert_kml``.
    """

    default_code = "KML_PLACEMARK_INVALID"


# ---------------------------------------------------------------------------
# Document parsing
# ---------------------------------------------------------------------------


def parse_document(content: str | bytes) -> _Element:
    """Parse KML content into its root element.

    ``str`` input is encoded as UTF-8 and parsed with the encoding
    forced, so an XML declaration naming another encoding does not
    break decoding of already-decoded text.

    Raises:
        KmlParseError: If the content is empty or not well-formed XML.
    """
    from lxml import etree  # type: ignore[attr-defined]

    if isinstance(content, str):
        data = content.encode("utf-8")
        encoding: str | None = "utf-8"
    else:
        data = content
        encoding = None

    if not data.strip():
        msg = "KML document is empty"
        raise KmlParseError(msg)

    parser = etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        huge_tree=False,
        encoding=encoding,
    )
    try:
        root = etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as exc:
        msg = f"Not valid XML: {exc}"
        raise KmlParseError(msg) from exc

    if root is None:
        msg = "KML document has no root element"
        raise KmlParseError(msg)

    tag = root.tag if isinstance(root.tag, str) else ""
    if f"{{{KML_NAMESPACE}}}" not in tag and "kml" not in tag.lower():
        logger.warning("Root element <%s> is not <kml>; converting anyway", tag)

    return root


# ---------------------------------------------------------------------------
# Namespace-agnostic lookup
# ---------------------------------------------------------------------------


def local_name(element: _Element) -> str:
    """Return the tag of *element* without its namespace."""
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def find_all(element: _Element, name: str) -> list[_Element]:
    """All descendants named *name*, in document order."""
    return element.xpath(".//*[local-name()=$name]", name=name)


def find_first(element: _Element, name: str) -> _Element | None:
    """First descendant named *name*, or ``None``."""
    found = element.xpath("(.//*[local-name()=$name])[1]", name=name)
    return found[0] if found else None


def find_child(element: _Element, name: str) -> _Element | None:
    """First direct child named *name*, or ``None``."""
    for child in element:
        if local_name(child) == name:
            return child
    return None


def text_of(element: _Element | None) -> str:
    """Stripped text content of *element* (``""`` when absent)."""
    if element is None:
        return ""
    return "".join(element.itertext()).strip()


def first_text(element: _Element, name: str) -> str:
    """Stripped text of the first descendant named *name*."""
    return text_of(find_first(element, name))
