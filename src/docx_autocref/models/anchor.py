"""
Footnote anchor model classes for docx_autocref.

An anchor pairs the Nth footnote reference marker in the body part with the
Nth footnote definition in the footnotes part. The table of anchors is built
once per conversion and shared, read-only, by the rewrite of both parts.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

from docx_autocref.errors import AnchorOutOfRangeError


@dataclass(frozen=True)
class FootnoteAnchor:
    """A footnote marker/definition pair.

    Attributes:
        ordinal: 1-based position of the marker in document order
        footnote_id: The ``w:id`` of the body marker
        definition_id: The ``w:id`` of the paired footnote definition
        marker_start: Offset in the body text where the marker's run starts
        marker_end: Offset in the body text just past the marker's run
        existing_bookmark: Name of a ``_Ref`` bookmark already wrapping the
            marker run, if any
    """

    ordinal: int
    footnote_id: str
    definition_id: str
    marker_start: int
    marker_end: int
    existing_bookmark: str | None = None


@dataclass(frozen=True)
class BookmarkPlan:
    """The bookmark a NOTEREF field will point at for one anchor.

    Attributes:
        ordinal: The anchor's ordinal
        name: Bookmark name (e.g. "_Ref000000003")
        bookmark_id: Id for a new ``w:bookmarkStart``; None when an existing
            bookmark already wraps the marker and is reused
    """

    ordinal: int
    name: str
    bookmark_id: int | None = None

    @property
    def is_new(self) -> bool:
        return self.bookmark_id is not None


@dataclass(frozen=True)
class AnchorTable:
    """Immutable, ordinal-indexed table of footnote anchors.

    Attributes:
        anchors: Anchors in document order; ``anchors[0].ordinal == 1``
        first_note: The footnote number displayed for the first anchor
        bookmark_names: Every bookmark name already present in either part
        max_bookmark_id: Highest ``w:bookmarkStart`` id in either part (-1 if none)
    """

    anchors: tuple[FootnoteAnchor, ...]
    first_note: int = 1
    bookmark_names: frozenset[str] = field(default_factory=frozenset)
    max_bookmark_id: int = -1

    def __len__(self) -> int:
        return len(self.anchors)

    def __iter__(self) -> Iterator[FootnoteAnchor]:
        return iter(self.anchors)

    def __getitem__(self, ordinal: int) -> FootnoteAnchor:
        """Get the anchor at a 1-based ordinal."""
        if ordinal < 1 or ordinal > len(self.anchors):
            raise IndexError(f"anchor ordinal {ordinal} out of range")
        return self.anchors[ordinal - 1]

    def contains(self, number: int) -> bool:
        """Check whether a displayed footnote number has an anchor."""
        return 0 <= number - self.first_note < len(self.anchors)

    def lookup(self, number: int, part_name: str = "", phrase: str = "") -> FootnoteAnchor:
        """Translate a displayed footnote number into its anchor.

        Args:
            number: The footnote number as it appears in the text
            part_name: Part containing the reference (for the error message)
            phrase: The matched phrase (for the error message)

        Returns:
            The FootnoteAnchor for that number

        Raises:
            AnchorOutOfRangeError: If no footnote has that number
        """
        if not self.contains(number):
            raise AnchorOutOfRangeError(
                number,
                part_name,
                phrase or f"note {number}",
                len(self.anchors),
                self.first_note,
            )
        return self.anchors[number - self.first_note]
