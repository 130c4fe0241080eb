"""
Scanner for "*supra*/*infra* note(s) N[–N]" cross-reference phrases.

The scanner walks the character map of a part (see text_map) with a small
explicit state machine instead of one pattern over the raw markup. A phrase is
accepted only when, in strict order:

1. ``supra`` or ``infra`` appears in italics, not preceded by a letter or digit
2. exactly one literal space follows
3. ``note`` or ``notes`` follows, not followed by another letter
4. one or more spaces (or no-break spaces) follow
5. a numeral follows, optionally joined to a second numeral by a hyphen or
   en dash with no whitespace

Run and text-node boundaries between these pieces are tolerated; anything that
occupies a position in the text (a second space, a tab, a note marker)
disqualifies the candidate. A numeral must sit inside a single text node and
outside any existing field, which is what makes a second pass over rewritten
content a no-op.
"""

import logging
from collections.abc import Iterator

from .constants import (
    CONNECTIVE_SPACES,
    KEYWORDS,
    MAX_NUMBER_DIGITS,
    NOTE_WORDS,
    RANGE_SEPARATORS,
)
from .models.cross_reference import CrossReferenceMatch, NumberToken, Range, Single
from .text_map import MappedChar, MappedParagraph, iter_paragraphs

logger = logging.getLogger(__name__)

_DIGITS = frozenset("0123456789")


class _Rejected(Exception):
    """Internal signal that a candidate phrase does not qualify."""


def _text_at(chars: tuple[MappedChar, ...], index: int, length: int) -> str:
    return "".join(c.char for c in chars[index : index + length])


def _is_word_char(chars: tuple[MappedChar, ...], index: int) -> bool:
    return 0 <= index < len(chars) and chars[index].char.isalnum()


def _match_keyword(chars: tuple[MappedChar, ...], index: int) -> str | None:
    """Return the keyword (as authored) starting at index, if any."""
    if _is_word_char(chars, index - 1):
        return None
    for keyword in KEYWORDS:
        candidate = _text_at(chars, index, len(keyword))
        if candidate not in (keyword, keyword.capitalize()):
            continue
        if all(c.italic for c in chars[index : index + len(keyword)]):
            return candidate
    return None


def _read_number(chars: tuple[MappedChar, ...], index: int) -> tuple[NumberToken, int]:
    """Read a numeral starting at index.

    Returns:
        Tuple of (NumberToken, index just past the numeral)

    Raises:
        _Rejected: If there is no usable numeral at index
    """
    end = index
    while end < len(chars) and chars[end].char in _DIGITS:
        end += 1
    digits = chars[index:end]
    if not digits:
        found = chars[index].char if index < len(chars) else "end of paragraph"
        raise _Rejected(f"expected a note number, found {found!r}")
    if any(c.in_field for c in digits):
        raise _Rejected("note number is already a field")
    if len({c.node.index for c in digits if c.node is not None}) != 1:
        raise _Rejected("note number is split across text runs")
    if len(digits) > MAX_NUMBER_DIGITS:
        raise _Rejected(f"note number has more than {MAX_NUMBER_DIGITS} digits")

    node = digits[0].node
    token = NumberToken(
        value=int("".join(c.char for c in digits)),
        start=digits[0].start,
        end=digits[-1].end,
        run_properties=node.run_properties,
        tag_start=node.tag_start,
        tag_end=node.tag_end,
        preserve_space=node.preserve_space,
    )
    return token, end


def _match_phrase(
    paragraph: MappedParagraph, index: int, keyword: str
) -> tuple[CrossReferenceMatch, int]:
    """Match the rest of a phrase after a keyword at index.

    Returns:
        Tuple of (CrossReferenceMatch, index just past the phrase)

    Raises:
        _Rejected: If the candidate violates the grammar
    """
    chars = paragraph.chars
    pos = index + len(keyword)

    if pos >= len(chars) or chars[pos].char != " ":
        raise _Rejected(f"'{keyword}' is not followed by a space")
    pos += 1

    for word in NOTE_WORDS:
        if _text_at(chars, pos, len(word)) == word and not (
            pos + len(word) < len(chars) and chars[pos + len(word)].char.isalpha()
        ):
            plurality = word
            break
    else:
        raise _Rejected(f"'{keyword} ' is not followed by 'note' or 'notes'")
    pos += len(plurality)

    connective_start = pos
    while pos < len(chars) and chars[pos].char in CONNECTIVE_SPACES:
        pos += 1
    if pos == connective_start:
        raise _Rejected(f"no space between '{plurality}' and the note number")

    first, pos = _read_number(chars, pos)
    numbers = (first,)
    reference: Single | Range = Single(first.value)

    if (
        pos + 1 < len(chars)
        and chars[pos].char in RANGE_SEPARATORS
        and chars[pos + 1].char in _DIGITS
    ):
        separator = chars[pos].char
        second, pos = _read_number(chars, pos + 1)
        numbers = (first, second)
        reference = Range(first.value, second.value, separator)

    match = CrossReferenceMatch(
        start=chars[index].start,
        end=numbers[-1].end,
        keyword=keyword,
        plurality=plurality,
        reference=reference,
        numbers=numbers,
        text="".join(c.char for c in chars[index:pos]),
        paragraph=paragraph.index,
    )
    return match, pos


def scan_paragraph(paragraph: MappedParagraph) -> Iterator[CrossReferenceMatch]:
    """Yield the cross-references in one flattened paragraph, left to right."""
    chars = paragraph.chars
    index = 0
    while index < len(chars):
        keyword = _match_keyword(chars, index)
        if keyword is None:
            index += 1
            continue
        try:
            match, index = _match_phrase(paragraph, index, keyword)
        except _Rejected as e:
            logger.debug(
                "Skipping candidate at paragraph %d: %s (%r)",
                paragraph.index,
                e,
                paragraph.text[index : index + 40],
            )
            index += len(keyword)
            continue
        logger.debug("Found cross-reference %r at paragraph %d", match.text, match.paragraph)
        yield match


def iter_cross_references(xml_text: str) -> Iterator[CrossReferenceMatch]:
    """Lazily find every cross-reference phrase in a part.

    This is a pure function of its input: calling it again on the same text
    yields the same matches.

    Args:
        xml_text: The full text of a WordprocessingML part

    Yields:
        CrossReferenceMatch objects in source order

    Example:
        >>> xml = (
        ...     '<w:p><w:r><w:rPr><w:i/></w:rPr><w:t>supra</w:t></w:r>'
        ...     '<w:r><w:t xml:space="preserve"> note 3.</w:t></w:r></w:p>'
        ... )
        >>> [str(m.reference) for m in iter_cross_references(xml)]
        ['3']
    """
    for paragraph in iter_paragraphs(xml_text):
        yield from scan_paragraph(paragraph)


def find_cross_references(xml_text: str) -> list[CrossReferenceMatch]:
    """Find every cross-reference phrase in a part. See iter_cross_references()."""
    return list(iter_cross_references(xml_text))
