"""Flat XML codec for gateway payloads.

Requests and replies are a single ``<xml>`` root whose child elements map
one-to-one to payload keys::

    <xml><appid>wx2421b1c4370ec43b</appid><mch_id>10000100</mch_id></xml>

Replies come from the network and are parsed with defusedxml.
"""

from collections.abc import Mapping
from xml.etree import ElementTree as ET

import defusedxml.ElementTree as DefusedET
from defusedxml import DefusedXmlException

ROOT_TAG = "xml"


class XMLDecodeError(ValueError):
    """Raised when a reply body is not a flat ``<xml>`` document."""


def encode_xml(payload: Mapping[str, str]) -> bytes:
    root = ET.Element(ROOT_TAG)
    for key, value in payload.items():
        ET.SubElement(root, key).text = value
    return ET.tostring(root, encoding="utf-8", xml_declaration=False)


def decode_xml(body: bytes | str) -> dict[str, str]:
    """Parse a reply body into a flat string mapping.

    CDATA sections are unwrapped; elements without text map to ``""``.
    Nested elements are not part of the format and are rejected.

    Raises:
        XMLDecodeError: Malformed, unsafe or nested XML.
    """
    try:
        root = DefusedET.fromstring(body)
    except (ET.ParseError, DefusedXmlException) as e:
        raise XMLDecodeError(f"invalid XML reply: {e}") from e

    result: dict[str, str] = {}
    for child in root:
        if len(child):
            raise XMLDecodeError(f"nested element <{child.tag}> in XML reply")
        result[child.tag] = child.text or ""
    return result
