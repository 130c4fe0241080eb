"""
Character map of the visible text in a WordprocessingML part.

Text in a Word part is fragmented across many ``<w:r>`` (run) and ``<w:t>``
(text) elements, so the literal text of a phrase such as "supra note 3" can be
interrupted by any number of tags. This module flattens a part into a
per-paragraph stream of characters. Each character remembers:

- its span in the raw part text (an escaped entity such as ``&#8211;`` is one
  character spanning the whole entity),
- the text node it came from, which knows whether its run is italic, whether
  it sits inside an existing field, and the raw run properties.

The part is never parsed as a tree. Tags are only lexed, so offsets always
refer to the original text and unmatched content can be copied through
untouched.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass

from .constants import OBJECT_PLACEHOLDER

# A markup token is either a tag or a run of character data
_TOKEN_RE = re.compile(r"<[^>]*>|[^<]+")

# Element tags only; declarations, comments and processing instructions don't match
_TAG_RE = re.compile(r"<(/?)([A-Za-z_][\w:.-]*)(.*?)(/?)>$", re.S)

_ENTITY_RE = re.compile(r"&(#[xX][0-9a-fA-F]+|#[0-9]+|[A-Za-z]+);")

_NAMED_ENTITIES = {"amp": "&", "lt": "<", "gt": ">", "quot": '"', "apos": "'"}

# Run content that is not text but occupies a position in the text stream
_CONTENT_TAGS = frozenset(
    {
        "w:tab",
        "w:ptab",
        "w:br",
        "w:cr",
        "w:sym",
        "w:noBreakHyphen",
        "w:softHyphen",
        "w:footnoteReference",
        "w:endnoteReference",
        "w:footnoteRef",
        "w:endnoteRef",
        "w:separator",
        "w:continuationSeparator",
        "w:drawing",
        "w:pict",
        "w:object",
    }
)

_FALSE_VALUES = frozenset({"0", "false", "off"})


def tag_attribute(attrs: str, name: str) -> str | None:
    """Get an attribute value from the raw attribute text of a tag."""
    match = re.search(rf"(?:^|\s){re.escape(name)}\s*=\s*(?:\"([^\"]*)\"|'([^']*)')", attrs)
    if match is None:
        return None
    return match.group(1) if match.group(1) is not None else match.group(2)


def _entity_char(entity: str) -> str:
    """Decode the body of a character or predefined entity reference."""
    if entity.startswith(("#x", "#X")):
        code = int(entity[2:], 16)
    elif entity.startswith("#"):
        code = int(entity[1:])
    else:
        return _NAMED_ENTITIES.get(entity, OBJECT_PLACEHOLDER)
    try:
        return chr(code)
    except (ValueError, OverflowError):
        return OBJECT_PLACEHOLDER


@dataclass(frozen=True)
class TextNode:
    """A ``<w:t>`` element and the run around it.

    Attributes:
        index: Sequential number of the text node within the part
        tag_start: Offset of the opening ``<w:t>`` tag
        tag_end: Offset just past the opening tag
        preserve_space: Whether the tag carries ``xml:space="preserve"``
        italic: Whether the run has direct italic formatting
        in_field: Whether the run is inside an existing field
        run_properties: Raw ``<w:rPr>...</w:rPr>`` of the run ("" if none)
    """

    index: int
    tag_start: int
    tag_end: int
    preserve_space: bool
    italic: bool
    in_field: bool
    run_properties: str = ""


@dataclass(frozen=True)
class MappedChar:
    """A visible character and where it lives in the raw part text.

    ``node`` is None for placeholder characters standing in for non-text run
    content (tabs, breaks, note markers).
    """

    char: str
    start: int
    end: int
    node: TextNode | None = None

    @property
    def italic(self) -> bool:
        return self.node is not None and self.node.italic

    @property
    def in_field(self) -> bool:
        return self.node is not None and self.node.in_field


@dataclass(frozen=True)
class MappedParagraph:
    """The flattened characters of one ``<w:p>``."""

    index: int
    chars: tuple[MappedChar, ...]

    @property
    def text(self) -> str:
        return "".join(c.char for c in self.chars)


class _LexState:
    """Formatting state carried across tags while lexing a part."""

    def __init__(self) -> None:
        self.in_run = False
        self.italic = False
        self.run_properties = ""
        self.rpr_depth = 0
        self.rpr_start = 0
        self.field_depth = 0
        self.complex_field_depth = 0
        self.node: TextNode | None = None
        self.node_count = 0

    @property
    def in_field(self) -> bool:
        return self.field_depth > 0 or self.complex_field_depth > 0

    def start_run(self) -> None:
        self.in_run = True
        self.italic = False
        self.run_properties = ""
        self.rpr_depth = 0


def _decode_text(segment: str, offset: int, node: TextNode) -> Iterator[MappedChar]:
    """Map each character of escaped character data to its raw span."""
    pos = 0
    for entity in _ENTITY_RE.finditer(segment):
        for k in range(pos, entity.start()):
            yield MappedChar(segment[k], offset + k, offset + k + 1, node)
        yield MappedChar(
            _entity_char(entity.group(1)),
            offset + entity.start(),
            offset + entity.end(),
            node,
        )
        pos = entity.end()
    for k in range(pos, len(segment)):
        yield MappedChar(segment[k], offset + k, offset + k + 1, node)


def iter_paragraphs(xml_text: str) -> Iterator[MappedParagraph]:
    """Lazily flatten a WordprocessingML part into paragraphs of mapped characters.

    Paragraph boundaries (``<w:p>`` open or close) always split the stream, so
    no phrase can be matched across paragraphs. Paragraphs with no visible
    characters are skipped.

    Args:
        xml_text: The full text of a part such as ``word/document.xml``

    Yields:
        MappedParagraph objects in document order
    """
    state = _LexState()
    chars: list[MappedChar] = []
    paragraph_index = -1

    for token in _TOKEN_RE.finditer(xml_text):
        raw = token.group()

        if raw[0] != "<":
            if state.node is not None:
                chars.extend(_decode_text(raw, token.start(), state.node))
            continue

        tag = _TAG_RE.match(raw)
        if tag is None:
            continue
        closing = tag.group(1) == "/"
        name = tag.group(2)
        attrs = tag.group(3)
        empty = tag.group(4) == "/"

        if name == "w:p":
            if chars:
                yield MappedParagraph(max(paragraph_index, 0), tuple(chars))
                chars = []
            if not closing:
                paragraph_index += 1
        elif name == "w:r":
            if closing:
                state.in_run = False
            elif not empty:
                state.start_run()
        elif name == "w:rPr" and state.in_run:
            if closing:
                if state.rpr_depth == 1:
                    state.run_properties = xml_text[state.rpr_start : token.end()]
                state.rpr_depth = max(state.rpr_depth - 1, 0)
            elif not empty:
                state.rpr_depth += 1
                if state.rpr_depth == 1:
                    state.rpr_start = token.start()
        elif name == "w:i" and state.in_run and state.rpr_depth == 1 and not closing:
            # Direct formatting only; a nested w:rPr belongs to w:rPrChange
            value = tag_attribute(attrs, "w:val")
            state.italic = value is None or value.lower() not in _FALSE_VALUES
        elif name == "w:t":
            if closing:
                state.node = None
            elif not empty:
                state.node = TextNode(
                    index=state.node_count,
                    tag_start=token.start(),
                    tag_end=token.end(),
                    preserve_space=tag_attribute(attrs, "xml:space") == "preserve",
                    italic=state.italic,
                    in_field=state.in_field,
                    run_properties=state.run_properties,
                )
                state.node_count += 1
        elif name == "w:fldSimple":
            if closing:
                state.field_depth = max(state.field_depth - 1, 0)
            elif not empty:
                state.field_depth += 1
        elif name == "w:fldChar" and not closing:
            field_char_type = tag_attribute(attrs, "w:fldCharType")
            if field_char_type == "begin":
                state.complex_field_depth += 1
            elif field_char_type == "end":
                state.complex_field_depth = max(state.complex_field_depth - 1, 0)
        elif name in _CONTENT_TAGS and state.in_run and state.rpr_depth == 0 and not closing:
            chars.append(MappedChar(OBJECT_PLACEHOLDER, token.start(), token.end()))

    if chars:
        yield MappedParagraph(max(paragraph_index, 0), tuple(chars))


def build_text_map(xml_text: str) -> list[MappedParagraph]:
    """Flatten a whole part at once. See iter_paragraphs()."""
    return list(iter_paragraphs(xml_text))
