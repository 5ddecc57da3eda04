"""Extract color groups from a generated SVG as standalone documents.

AIDEV-NOTE: Extraction never raises. A missing group or unparsable input
is logged and reported as None (single group) or {} (all groups);
callers treat that as "nothing to export".
"""

import copy
import logging
import xml.etree.ElementTree as ET

from .svg_builder import parse_group_id

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
ET.register_namespace("", SVG_NS)

# Optional root attributes copied onto extracted documents
_OPTIONAL_ROOT_ATTRIBUTES = ("viewBox", "shape-rendering", "style")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_svg_document(svg_content: str) -> ET.Element | None:
    """Parse SVG text into an element tree root, or None if malformed."""
    try:
        root = ET.fromstring(svg_content)
    except (ET.ParseError, TypeError) as e:
        logger.warning("Could not parse SVG content: %s", e)
        return None
    if _local_name(root.tag) != "svg":
        logger.warning("Root element is <%s>, not <svg>", _local_name(root.tag))
        return None
    return root


def _group_key(element: ET.Element) -> str | None:
    return element.get("data-key") or parse_group_id(element.get("id", ""))


def find_color_group(root: ET.Element, color_key: str) -> ET.Element | None:
    """Locate the <g> for a color key.

    The data-key attribute is authoritative; ids ("<n>color-group-<key>"
    or "color-group-<key>") are used for documents without it.
    """
    groups = [e for e in root.iter() if _local_name(e.tag) == "g"]
    for element in groups:
        if element.get("data-key") == color_key:
            return element
    for element in groups:
        if parse_group_id(element.get("id", "")) == color_key:
            return element
    return None


def build_group_document(root: ET.Element, group: ET.Element) -> ET.Element:
    """New <svg> root holding only `group` plus the source's metadata and
    background rect, sized like the source document."""
    document = ET.Element(root.tag)
    document.set("width", root.get("width", "100%"))
    document.set("height", root.get("height", "100%"))
    for name in _OPTIONAL_ROOT_ATTRIBUTES:
        value = root.get(name)
        if value is not None:
            document.set(name, value)

    for child in root:
        if _local_name(child.tag) == "metadata":
            document.append(copy.deepcopy(child))
            break
    for child in root:
        if _local_name(child.tag) == "rect":
            document.append(copy.deepcopy(child))
            break

    document.append(copy.deepcopy(group))
    return document


def extract_color_group_svg(svg_content: str, color_key: str) -> str | None:
    """Extract a single color group as its own SVG document.

    Args:
        svg_content: Full SVG produced by generate_svg
        color_key: Group key, e.g. "gray-128" or "cyan"

    Returns:
        Standalone SVG string, or None if the group is absent or the
        input cannot be parsed
    """
    root = parse_svg_document(svg_content)
    if root is None:
        return None

    group = find_color_group(root, color_key)
    if group is None:
        logger.warning("Color group %r not found in SVG", color_key)
        return None

    return ET.tostring(build_group_document(root, group), encoding="unicode")


def extract_all_color_groups(svg_content: str) -> "dict[str, str]":
    """Extract every color group as a separate SVG document.

    Returns:
        Mapping of group key to standalone SVG; empty on failure
    """
    root = parse_svg_document(svg_content)
    if root is None:
        return {}

    result: "dict[str, str]" = {}
    for element in root.iter():
        if _local_name(element.tag) != "g":
            continue
        if parse_group_id(element.get("id", "")) is None:
            continue
        key = _group_key(element)
        result[key] = ET.tostring(
            build_group_document(root, element), encoding="unicode"
        )

    logger.debug("Extracted %d color groups", len(result))
    return result
