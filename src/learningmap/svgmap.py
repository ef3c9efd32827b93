"""
SVG document handling for learning maps.

Wraps raw SVG markup in an lxml tree that can be mutated by element id.
Markup comes from browsers and editors and may be damaged (unescaped
characters, escaped-data sections rewritten into comments), so parsing
never fails: damaged fragments end up as literal text.
"""

import html
import logging
import re
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Iterator, NamedTuple

import numpy as np
from lxml import etree

if TYPE_CHECKING:
    from src.learningmap.placestore import PlaceStore

logger = logging.getLogger(__name__)

XLINK_NS = "http://www.w3.org/1999/xlink"
NAMESPACES = {
    "xlink": XLINK_NS,
    "xml": "http://www.w3.org/XML/1998/namespace",
}

# CSS classes understood by the learning map stylesheet
HIDDEN_CLASS = "learningmap-hidden"
REACHABLE_CLASS = "learningmap-reachable"
VISITED_CLASS = "learningmap-visited"
WAYGONE_CLASS = "learningmap-waygone"
PLACE_CLASS = "learningmap-place"
TEXT_CLASS = "learningmap-text"
CHECKMARK_CLASS = "learningmap-checkmark"
STATE_CLASSES = (HIDDEN_CLASS, REACHABLE_CLASS, VISITED_CLASS, WAYGONE_CLASS)

# Groups every map document must contain, suffixed with the map id
GROUP_NAMES = ("backgroundGroup", "pathsGroup", "placesGroup", "textGroup")

# Weights of P0, P1, P2 for a quadratic Bezier curve at t = 0.5
BEZIER_MIDPOINT_WEIGHTS = np.array([0.25, 0.5, 0.25])

# Markup segments whose content is copied verbatim by the text passes
_PROTECTED_MARKUP = re.compile(r"<!\[CDATA\[.*?\]\]>|<!--.*?-->|<\?.*?\?>", re.DOTALL)
_STRAY_LT = re.compile(r"<(?!/?[A-Za-z_:][^<>]*>|!|\?)")
_STRAY_AMP = re.compile(r"&(?!(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#x[0-9A-Fa-f]+);)")
_SELF_CLOSING = re.compile(r"(?<! )/>")
_XML_DECLARATION = re.compile(r"\A\ufeff?\s*<\?xml\b[^>]*\?>")
_PATH_TOKEN = re.compile(r"[A-Za-z]|[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")

# Comment payload left behind when a browser rewrites <![CDATA[x]]> as <!--[CDATA[x]]-->
_MANGLED_CDATA_PREFIX = "[CDATA["
_MANGLED_CDATA_SUFFIX = "]]"


class Point(NamedTuple):
    x: int
    y: int


class NodeKind(Enum):
    """Kinds of content found inside title and desc elements."""

    TEXT = "text"
    COMMENT = "comment"
    MANGLED_CDATA = "mangled_cdata"
    ENTITY = "entity"
    ELEMENT = "element"
    OTHER = "other"


TEXT_PRODUCING_KINDS = {NodeKind.TEXT, NodeKind.MANGLED_CDATA, NodeKind.ENTITY, NodeKind.ELEMENT}


def escape_content(text: str) -> str:
    """Escape ``&``, ``<``, ``>`` and ``"`` for use in XML."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def local_name(element: Any) -> str:
    """Tag name of an element without namespace ('' for comments and PIs)."""
    if not isinstance(element.tag, str):
        return ""
    return etree.QName(element).localname


def escape_stray_markup(markup: str) -> str:
    """
    Escape characters that cannot start markup.

    A ``<`` that does not open a complete tag, comment, CDATA section or
    processing instruction becomes ``&lt;``, so ``a<b</title>`` keeps its
    text. An ``&`` that does not open an entity becomes ``&amp;``. Comments
    and CDATA sections are copied unchanged.
    """
    return _outside_protected(markup, _escape_segment)


def _escape_segment(segment: str) -> str:
    return _STRAY_LT.sub("&lt;", _STRAY_AMP.sub("&amp;", segment))


def _outside_protected(markup: str, transform: Callable[[str], str]) -> str:
    """Apply ``transform`` to everything but comments, CDATA and PIs."""
    parts: list[str] = []
    position = 0
    for match in _PROTECTED_MARKUP.finditer(markup):
        parts.append(transform(markup[position:match.start()]))
        parts.append(match.group(0))
        position = match.end()
    parts.append(transform(markup[position:]))
    return "".join(parts)


def classify_node(node: Any) -> tuple[NodeKind, str]:
    """
    Classify a child node of a title or desc element.

    Returns:
        Tuple of (kind, text the node contributes if it produces text)
    """
    if node.tag is etree.Comment:
        content = node.text or ""
        if content.startswith(_MANGLED_CDATA_PREFIX) and content.endswith(_MANGLED_CDATA_SUFFIX):
            return NodeKind.MANGLED_CDATA, content[len(_MANGLED_CDATA_PREFIX):-len(_MANGLED_CDATA_SUFFIX)]
        return NodeKind.COMMENT, content
    if node.tag is etree.Entity:
        return NodeKind.ENTITY, html.unescape(node.text or "")
    if isinstance(node.tag, str):
        return NodeKind.ELEMENT, "".join(node.itertext())
    return NodeKind.OTHER, ""


def _content_segments(element: Any) -> Iterator[tuple[NodeKind, str]]:
    """Yield the content of an element in document order."""
    if element.text:
        yield NodeKind.TEXT, element.text
    for child in element:
        yield classify_node(child)
        if child.tail:
            yield NodeKind.TEXT, child.tail


def quadratic_midpoint(d: str) -> Point | None:
    """
    Return the point at t = 0.5 of a path ``M x0 y0 Q x1 y1 x2 y2``.

    The point is 0.25 * P0 + 0.5 * P1 + 0.25 * P2, truncated to integers.
    Returns None for any other path shape.
    """
    tokens = _PATH_TOKEN.findall(d or "")
    if len(tokens) != 8 or tokens[0] != "M" or tokens[3] != "Q":
        return None
    try:
        numbers = [float(t) for t in tokens[1:3] + tokens[4:]]
    except ValueError:
        return None
    x, y = BEZIER_MIDPOINT_WEIGHTS @ np.array(numbers).reshape(3, 2)
    return Point(int(x), int(y))


def _to_number(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class SvgMap:
    """
    Mutable SVG document of one learning map.

    All mutators take element ids and do nothing for unknown ids; repeated
    identical calls leave the document unchanged after the first one.
    """

    def __init__(self, svgcode: str, placestore: "PlaceStore | dict[str, Any] | None" = None):
        """
        Parse and sanitize SVG markup.

        Args:
            svgcode: Raw SVG markup
            placestore: PlaceStore or plain document providing ``mapid`` and
                ``showtext``
        """
        if placestore is None:
            config: dict[str, Any] = {}
        elif isinstance(placestore, dict):
            config = placestore
        else:
            config = placestore.to_dict()
        self.mapid = str(config.get("mapid", ""))
        self.showtext = bool(config.get("showtext", False))

        self._root = self._parse(svgcode)
        self._normalize_text_elements()

    @staticmethod
    def escape_content(text: str) -> str:
        return escape_content(text)

    @staticmethod
    def _parse(svgcode: str) -> Any:
        parser = etree.XMLParser(
            recover=True,
            resolve_entities=False,
            no_network=True,
            remove_blank_text=False,
        )
        # The markup is already decoded; a declared encoding would decode it twice
        svgcode = _XML_DECLARATION.sub("", svgcode, count=1)
        try:
            root = etree.fromstring(escape_stray_markup(svgcode).encode("utf-8"), parser)
        except (etree.XMLSyntaxError, ValueError) as e:
            logger.warning(f"Unparseable SVG, starting from an empty map: {e}")
            root = None
        if root is None:
            return etree.Element("svg")
        if len(parser.error_log):
            logger.debug(f"Recovered from {len(parser.error_log)} SVG parse errors")
        return root

    def _normalize_text_elements(self) -> None:
        """Flatten title and desc content into a single run of plain text."""
        targets = [el for el in self._iter_elements() if local_name(el) in ("title", "desc")]
        for element in targets:
            text = "".join(
                content
                for kind, content in _content_segments(element)
                if kind in TEXT_PRODUCING_KINDS
            )
            for child in list(element):
                element.remove(child)
            element.text = text

    def _iter_elements(self, scope: Any = None) -> Iterator[Any]:
        return (scope if scope is not None else self._root).iter(tag=etree.Element)

    def _tag(self, name: str) -> str:
        """Qualify a tag name with the document's namespace."""
        namespace = etree.QName(self._root).namespace
        return f"{{{namespace}}}{name}" if namespace else name

    @staticmethod
    def _attribute_keys(name: str) -> list[str]:
        """Candidate lxml keys for a possibly prefixed attribute name."""
        prefix, _, local = name.rpartition(":")
        if prefix in NAMESPACES:
            return [f"{{{NAMESPACES[prefix]}}}{local}", name]
        return [name]

    def _ensure_namespace(self, prefix: str) -> None:
        # The xml prefix is always bound
        if prefix == "xml" or self._root.nsmap.get(prefix) == NAMESPACES[prefix]:
            return
        keep = [p for p in self._root.nsmap if p] + [prefix]
        etree.cleanup_namespaces(
            self._root,
            top_nsmap={prefix: NAMESPACES[prefix]},
            keep_ns_prefixes=keep,
        )

    def _set(self, element: Any, name: str, value: str) -> None:
        keys = self._attribute_keys(name)
        if len(keys) > 1:
            self._ensure_namespace(name.split(":", 1)[0])
            # Drop a literal prefixed attribute left by a missing declaration
            element.attrib.pop(keys[1], None)
        element.set(keys[0], value)

    @staticmethod
    def _get(element: Any, name: str) -> str:
        for key in SvgMap._attribute_keys(name):
            value = element.get(key)
            if value is not None:
                return value
        return ""

    # Lookup

    def get_element_by_id(self, id: str) -> Any:
        """Return the element with the given id, or None."""
        matches = self._root.xpath("//*[@id=$id]", id=id)
        return matches[0] if matches else None

    def get_elements_by_classname(self, classname: str) -> list[Any]:
        return [
            el for el in self._iter_elements()
            if classname in (el.get("class") or "").split()
        ]

    def get_attribute(self, id: str, name: str) -> str:
        """Return an attribute value, or '' if element or attribute is missing."""
        element = self.get_element_by_id(id)
        if element is None:
            return ""
        return self._get(element, name)

    def set_attribute(self, id: str, name: str, value: str) -> None:
        element = self.get_element_by_id(id)
        if element is not None:
            self._set(element, name, value)

    # State classes

    def _add_class(self, id: str, token: str) -> None:
        element = self.get_element_by_id(id)
        if element is None:
            return
        classes = (element.get("class") or "").split()
        if token not in classes:
            classes.append(token)
            element.set("class", " ".join(classes))

    def set_hidden(self, id: str) -> None:
        self._add_class(id, HIDDEN_CLASS)

    def set_reachable(self, id: str) -> None:
        self._add_class(id, REACHABLE_CLASS)

    def set_visited(self, id: str) -> None:
        self._add_class(id, VISITED_CLASS)

    def set_waygone(self, id: str) -> None:
        self._add_class(id, WAYGONE_CLASS)

    def clear_state(self, id: str) -> None:
        """Remove all state classes so a new classification can be applied."""
        element = self.get_element_by_id(id)
        if element is None or element.get("class") is None:
            return
        classes = [c for c in element.get("class").split() if c not in STATE_CLASSES]
        if classes:
            element.set("class", " ".join(classes))
        else:
            del element.attrib["class"]

    # Links

    def _link_for(self, id: str) -> Any:
        """The anchor with this id, or the anchor directly wrapping the element."""
        element = self.get_element_by_id(id)
        if element is None:
            return None
        if local_name(element) == "a":
            return element
        parent = element.getparent()
        if parent is not None and local_name(parent) == "a":
            return parent
        return None

    def set_link(self, id: str, href: str) -> None:
        link = self._link_for(id)
        if link is not None:
            self._set(link, "xlink:href", href)

    def remove_link(self, id: str) -> None:
        link = self._link_for(id)
        if link is None:
            return
        for key in self._attribute_keys("xlink:href"):
            link.attrib.pop(key, None)

    def wrap_in_link(self, id: str, href: str) -> None:
        """
        Wrap an element in a new anchor at the element's position.

        An element that already sits directly inside an anchor only gets
        that anchor's target updated.
        """
        element = self.get_element_by_id(id)
        if element is None:
            return
        parent = element.getparent()
        if parent is None:
            logger.warning(f"Cannot wrap root element '{id}' in a link")
            return
        if local_name(parent) == "a":
            self._set(parent, "xlink:href", href)
            return

        tail, element.tail = element.tail, None
        link = parent.makeelement(self._tag("a"), {})
        parent.insert(parent.index(element), link)
        link.tail = tail
        link.append(element)
        self._set(link, "xlink:href", href)

    def wrap_items_in_links(self, classname: str, href: str) -> None:
        for element in self.get_elements_by_classname(classname):
            if element.get("id"):
                self.wrap_in_link(element.get("id"), href)

    # Structure

    @staticmethod
    def _detach(element: Any) -> None:
        """Remove an element from its parent, keeping the text that followed it."""
        parent = element.getparent()
        if parent is None:
            return
        if element.tail:
            previous = element.getprevious()
            if previous is not None:
                previous.tail = (previous.tail or "") + element.tail
            else:
                parent.text = (parent.text or "") + element.tail
        parent.remove(element)

    def remove_element(self, id: str) -> None:
        element = self.get_element_by_id(id)
        if element is not None:
            self._detach(element)

    def remove_elements_by_classname(self, classname: str) -> None:
        for element in self.get_elements_by_classname(classname):
            self._detach(element)

    def fix_svg(self) -> None:
        """
        Give the root and the standard groups their map-specific ids.

        Groups stored without the map id suffix are renamed, missing ones
        are created. Safe to call repeatedly.
        """
        self._root.set("id", f"learningmap-svgmap-{self.mapid}")
        for name in GROUP_NAMES:
            group_id = f"{name}-{self.mapid}"
            if self.get_element_by_id(group_id) is not None:
                continue
            legacy = self.get_element_by_id(name)
            if legacy is not None:
                legacy.set("id", group_id)
                continue
            group = self._root.makeelement(self._tag("g"), {"id": group_id})
            if name == "backgroundGroup":
                # Background is drawn first, below everything else
                self._root.insert(0, group)
            else:
                self._root.append(group)
            logger.debug(f"Created missing group {group_id}")

    def update_text_and_title(self, place_id: str, text: str, extra: str = "") -> None:
        """
        Set the label of a place.

        Args:
            place_id: SVG id of the place (e.g. ``p0``)
            text: Label shown on the map
            extra: Additional text appended to the tooltip title only
        """
        for element_id, content in ((f"title{place_id}", text + extra), (f"text{place_id}", text)):
            element = self.get_element_by_id(element_id)
            if element is None:
                continue
            for child in list(element):
                element.remove(child)
            element.text = content

    def add_checkmark(self, place_id: str) -> None:
        """Overlay the map's checkmark symbol right after a place's shape."""
        place = self.get_element_by_id(place_id)
        if place is None or place.getparent() is None:
            return
        checkmark_id = f"checkmark{place_id}"
        if self.get_element_by_id(checkmark_id) is not None:
            return

        parent = place.getparent()
        use = parent.makeelement(
            self._tag("use"),
            {
                "id": checkmark_id,
                "class": CHECKMARK_CLASS,
                "x": place.get("cx", "0"),
                "y": place.get("cy", "0"),
            },
        )
        parent.insert(parent.index(place) + 1, use)
        use.tail, place.tail = place.tail, None
        self._set(use, "xlink:href", f"#checkmark-{self.mapid}")

    # Coordinates

    def _group_or_root(self, name: str) -> Any:
        group = self.get_element_by_id(f"{name}-{self.mapid}")
        return group if group is not None else self._root

    @staticmethod
    def _place_point(element: Any) -> Point | None:
        name = local_name(element)
        if name in ("circle", "ellipse"):
            x, y = _to_number(element.get("cx")), _to_number(element.get("cy"))
        elif name == "rect" and PLACE_CLASS in (element.get("class") or "").split():
            x, y = _to_number(element.get("x")), _to_number(element.get("y"))
            width = _to_number(element.get("width")) or 0
            height = _to_number(element.get("height")) or 0
            if x is not None and y is not None:
                x, y = x + width / 2, y + height / 2
        else:
            return None
        if x is None or y is None:
            return None
        return Point(int(x), int(y))

    def get_place_point(self, id: str) -> Point | None:
        """Representative point of a single place shape."""
        element = self.get_element_by_id(id)
        return self._place_point(element) if element is not None else None

    def get_coordinates(self) -> list[Point]:
        """
        Return anchor points for text placement.

        Places contribute their centre. When text display is enabled every
        quadratic path contributes its curve midpoint as well.
        """
        coordinates = [
            point
            for point in map(self._place_point, self._iter_elements(self._group_or_root("placesGroup")))
            if point is not None
        ]
        if self.showtext:
            for element in self._iter_elements(self._group_or_root("pathsGroup")):
                if local_name(element) != "path":
                    continue
                point = quadratic_midpoint(element.get("d"))
                if point is not None:
                    coordinates.append(point)
        return coordinates

    # Output

    def get_svgcode(self) -> str:
        """Serialize the document for inlining into an HTML page."""
        code = etree.tostring(self._root, encoding="unicode")
        return _outside_protected(code, lambda segment: _SELF_CLOSING.sub(" />", segment))
