"""
Field rewriting for matched cross-references.

The rewriter turns scanner matches into a list of text edits against the raw
part text and applies them in one pass, copying everything between edits
through unchanged. Every referenced number is resolved against the anchor
table before any output is produced, so a bad reference aborts the part with
nothing half-written.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .errors import RewriteError
from .field_xml import FieldXMLGenerator
from .models.anchor import AnchorTable, BookmarkPlan
from .models.cross_reference import CrossReferenceMatch
from .results import PartResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextEdit:
    """Replace ``text[start:end]`` with ``replacement``; start == end inserts."""

    start: int
    end: int
    replacement: str


def apply_edits(text: str, edits: Iterable[TextEdit], part_name: str = "") -> str:
    """Apply non-overlapping edits to a text buffer.

    Args:
        text: The original text
        edits: Edits in any order
        part_name: Part being edited (for the error message)

    Returns:
        The edited text; the original text when there are no edits

    Raises:
        RewriteError: If two edits overlap
    """
    ordered = sorted(edits, key=lambda e: (e.start, e.end))
    if not ordered:
        return text

    pieces = []
    pos = 0
    for edit in ordered:
        if edit.start < pos:
            raise RewriteError(part_name, f"overlapping edits at offset {edit.start}")
        pieces.append(text[pos : edit.start])
        pieces.append(edit.replacement)
        pos = edit.end
    pieces.append(text[pos:])
    return "".join(pieces)


def referenced_ordinals(
    table: AnchorTable, matches: Iterable[CrossReferenceMatch], part_name: str
) -> set[int]:
    """Resolve every number in a part's matches to an anchor ordinal.

    Raises:
        AnchorOutOfRangeError: If any number has no footnote
    """
    ordinals = set()
    for match in matches:
        for token in match.numbers:
            ordinals.add(table.lookup(token.value, part_name, match.text).ordinal)
    return ordinals


class FieldRewriter:
    """Rewrites parts so matched numerals become NOTEREF fields.

    The anchor table and bookmark plan are shared, read-only, by the rewrite
    of both parts.

    Example:
        >>> rewriter = FieldRewriter(table, plans, FieldXMLGenerator())
        >>> result = rewriter.rewrite(footnotes_xml, matches, "word/footnotes.xml")
    """

    def __init__(
        self,
        anchors: AnchorTable,
        bookmarks: dict[int, BookmarkPlan],
        generator: FieldXMLGenerator | None = None,
    ) -> None:
        self._anchors = anchors
        self._bookmarks = bookmarks
        self._generator = generator or FieldXMLGenerator()

    def _bookmark_for(self, number: int, part_name: str, phrase: str) -> BookmarkPlan:
        anchor = self._anchors.lookup(number, part_name, phrase)
        plan = self._bookmarks.get(anchor.ordinal)
        if plan is None:
            raise RewriteError(part_name, f"no bookmark planned for footnote {anchor.ordinal}")
        return plan

    def _field_edits(
        self, xml_text: str, matches: list[CrossReferenceMatch], part_name: str
    ) -> list[TextEdit]:
        """Build one edit per numeral, plus any xml:space fixes on split text nodes."""
        edits: list[TextEdit] = []
        fixed_tags: set[int] = set()

        for match in matches:
            for token in match.numbers:
                plan = self._bookmark_for(token.value, part_name, match.text)
                fragment = self._generator.create_field(
                    xml_text[token.start : token.end], plan.name, token.run_properties
                )
                edits.append(TextEdit(token.start, token.end, fragment))

                if not token.preserve_space and token.tag_start not in fixed_tags:
                    fixed_tags.add(token.tag_start)
                    tag = xml_text[token.tag_start : token.tag_end]
                    edits.append(
                        TextEdit(
                            token.tag_start,
                            token.tag_end,
                            self._generator.preserve_space_tag(tag),
                        )
                    )
            logger.debug("Rewriting %r in %s", match.text, part_name)

        return edits

    def _bookmark_edits(self) -> list[TextEdit]:
        """Build the bookmark start/end insertions around footnote marker runs."""
        edits: list[TextEdit] = []
        for ordinal, plan in sorted(self._bookmarks.items()):
            if not plan.is_new:
                continue
            anchor = self._anchors[ordinal]
            edits.append(
                TextEdit(
                    anchor.marker_start,
                    anchor.marker_start,
                    self._generator.bookmark_start(plan.bookmark_id, plan.name),
                )
            )
            edits.append(
                TextEdit(
                    anchor.marker_end,
                    anchor.marker_end,
                    self._generator.bookmark_end(plan.bookmark_id),
                )
            )
        return edits

    def rewrite(
        self,
        xml_text: str,
        matches: Iterable[CrossReferenceMatch],
        part_name: str,
        insert_bookmarks: bool = False,
    ) -> PartResult:
        """Rewrite one part.

        Args:
            xml_text: The part's original text
            matches: The scanner's matches for this part
            part_name: Package part name, used in diagnostics
            insert_bookmarks: Wrap planned footnote markers in bookmarks (body part only)

        Returns:
            PartResult with the new text and counts

        Raises:
            AnchorOutOfRangeError: If a match refers to a missing footnote
            RewriteError: If the edits cannot be applied cleanly
        """
        matches = list(matches)
        edits = self._field_edits(xml_text, matches, part_name)
        fields_inserted = sum(len(m.numbers) for m in matches)

        bookmarks_inserted = 0
        if insert_bookmarks:
            bookmark_edits = self._bookmark_edits()
            bookmarks_inserted = len(bookmark_edits) // 2
            edits.extend(bookmark_edits)

        text = apply_edits(xml_text, edits, part_name)
        logger.info(
            "Rewrote %s: %d fields, %d bookmarks", part_name, fields_inserted, bookmarks_inserted
        )
        return PartResult(
            part_name=part_name,
            text=text,
            matches=matches,
            fields_inserted=fields_inserted,
            bookmarks_inserted=bookmarks_inserted,
        )
