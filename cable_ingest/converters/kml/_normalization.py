"""Placemark metadata normalization for KML conversion.

Collects the descriptive fields survey tools put on a Placemark:
description, TimeStamp/TimeSpan, visibility/open flags, Snippet, and
both ExtendedData patterns (``Data/value`` and ``SchemaData/SimpleData``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from cable_ingest.converters.kml._validation import find_all, find_child, first_text, text_of

if TYPE_CHECKING:
    from lxml.etree import _Element


def _flag(text: str) -> bool:
    return text == "1" or text.lower() == "true"


def extract_metadata(placemark: _Element) -> dict[str, Any]:
    """Extract Placemark metadata into a flat dict.

    Standard fields use fixed keys (``description``, ``timestamp``,
    ``timeSpan``, ``visibility``, ``open``, ``snippet``); ExtendedData
    entries use their own ``name`` attribute as key.
    """
    metadata: dict[str, Any] = {}

    description = text_of(find_child(placemark, "description"))
    if description:
        metadata["description"] = description

    time_stamp = find_child(placemark, "TimeStamp")
    if time_stamp is not None:
        when = first_text(time_stamp, "when")
        if when:
            metadata["timestamp"] = when

    time_span = find_child(placemark, "TimeSpan")
    if time_span is not None:
        begin = first_text(time_span, "begin")
        end = first_text(time_span, "end")
        if begin or end:
            metadata["timeSpan"] = {"begin": begin or None, "end": end or None}

    visibility = find_child(placemark, "visibility")
    if visibility is not None and text_of(visibility):
        metadata["visibility"] = _flag(text_of(visibility))

    is_open = find_child(placemark, "open")
    if is_open is not None and text_of(is_open):
        metadata["open"] = _flag(text_of(is_open))

    snippet = text_of(find_child(placemark, "Snippet"))
    if snippet:
        metadata["snippet"] = snippet

    extended = find_child(placemark, "ExtendedData")
    if extended is not None:
        metadata.update(extract_extended_data(extended))

    return metadata


def extract_extended_data(extended: _Element) -> dict[str, str]:
    """Extract ``ExtendedData`` key-value pairs.

    Handles both KML metadata patterns:
    - ``ExtendedData/Data/value``: untyped key-value pairs.
    - ``ExtendedData/SchemaData/SimpleData``: typed fields defined by a
      ``<Schema>`` element.
    """
    values: dict[str, str] = {}

    for data_elem in find_all(extended, "Data"):
        key = data_elem.get("name", "")
        value = text_of(find_child(data_elem, "value"))
        if key and value:
            values[key] = value

    for simple_data in find_all(extended, "SimpleData"):
        key = simple_data.get("name", "")
        value = text_of(simple_data)
        if key and value:
            values[key] = value

    return values
