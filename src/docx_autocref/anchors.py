"""
Footnote anchor enumeration and bookmark planning.

Word numbers footnotes by the order of their reference markers in the body,
so "note 3" means the third ``<w:footnoteReference>`` in ``document.xml``.
A NOTEREF field cannot point at a marker directly; it points at a bookmark
wrapping the marker's run. This module:

- pairs the Nth marker in the body with the Nth footnote definition in
  ``footnotes.xml`` and refuses to continue when the counts differ,
- records which markers already sit inside a ``_Ref`` bookmark,
- collects existing bookmark names and ids so new bookmarks never collide.

The Bookmark Markup
-------------------

Word's markup for a bookmark is a pair of empty elements sharing an id::

    <w:bookmarkStart w:id="7" w:name="_Ref000000003"/>
    <w:r>...<w:footnoteReference w:id="3"/></w:r>
    <w:bookmarkEnd w:id="7"/>
"""

import logging
import re
from collections.abc import Iterable

from .constants import REF_BOOKMARK_DIGITS, REF_BOOKMARK_PREFIX
from .errors import AnchorCountMismatchError
from .models.anchor import AnchorTable, BookmarkPlan, FootnoteAnchor
from .text_map import tag_attribute

logger = logging.getLogger(__name__)

# Tags that matter for locating markers and bookmarks in the body part
_BODY_TAG_RE = re.compile(
    r"<(/?)w:(r|footnoteReference|bookmarkStart|bookmarkEnd)\b([^>]*?)(/?)>"
)

# Footnote definitions; \b keeps w:footnotes, w:footnoteRef and w:footnotePr out
_DEFINITION_RE = re.compile(r"<w:footnote\b([^>]*?)/?>")

_BOOKMARK_START_RE = re.compile(r"<w:bookmarkStart\b([^>]*?)/?>")


def _find_markers(document_xml: str) -> list[tuple[str, int, int, str | None]]:
    """Locate footnote reference markers in the body part.

    Returns:
        List of (footnote_id, run_start, run_end, existing_ref_bookmark) in
        document order. run_start/run_end span the ``<w:r>`` holding the marker.
    """
    markers: list[tuple[str, int, int, str | None]] = []

    # _Ref bookmark starts keyed by where their tag ends, ends keyed by where they start
    starts_by_end: dict[int, tuple[str, str]] = {}
    ends_by_start: dict[int, str] = {}

    run_start: int | None = None
    run_marker_ids: list[str] = []

    for tag in _BODY_TAG_RE.finditer(document_xml):
        closing = tag.group(1) == "/"
        name = tag.group(2)
        attrs = tag.group(3)
        empty = tag.group(4) == "/"

        if name == "r":
            if not closing and not empty:
                run_start = tag.start()
                run_marker_ids = []
            elif closing and run_start is not None:
                for footnote_id in run_marker_ids:
                    markers.append((footnote_id, run_start, tag.end(), None))
                run_start = None
                run_marker_ids = []
        elif name == "footnoteReference" and not closing:
            footnote_id = tag_attribute(attrs, "w:id") or ""
            if run_start is None:
                # A marker outside a run cannot be bookmarked around its run
                markers.append((footnote_id, tag.start(), tag.end(), None))
            else:
                run_marker_ids.append(footnote_id)
        elif name == "bookmarkStart" and not closing:
            bookmark_name = tag_attribute(attrs, "w:name") or ""
            if bookmark_name.startswith(REF_BOOKMARK_PREFIX):
                starts_by_end[tag.end()] = (tag_attribute(attrs, "w:id") or "", bookmark_name)
        elif name == "bookmarkEnd" and not closing:
            ends_by_start[tag.start()] = tag_attribute(attrs, "w:id") or ""

    return [
        (
            footnote_id,
            start,
            end,
            _wrapping_bookmark(document_xml, start, end, starts_by_end, ends_by_start),
        )
        for footnote_id, start, end, _ in markers
    ]


def _wrapping_bookmark(
    document_xml: str,
    run_start: int,
    run_end: int,
    starts_by_end: dict[int, tuple[str, str]],
    ends_by_start: dict[int, str],
) -> str | None:
    """Return the _Ref bookmark immediately wrapping a run, if there is one."""
    before = run_start
    while before > 0 and document_xml[before - 1].isspace():
        before -= 1
    start = starts_by_end.get(before)
    if start is None:
        return None
    bookmark_id, bookmark_name = start

    after = run_end
    while after < len(document_xml) and document_xml[after].isspace():
        after += 1
    if ends_by_start.get(after) != bookmark_id:
        return None
    return bookmark_name


def _find_definitions(footnotes_xml: str) -> list[str]:
    """Return the ids of user footnote definitions, skipping separators."""
    ids = []
    for definition in _DEFINITION_RE.finditer(footnotes_xml):
        attrs = definition.group(1)
        # separator, continuationSeparator and continuationNotice carry w:type
        if tag_attribute(attrs, "w:type") is not None:
            continue
        ids.append(tag_attribute(attrs, "w:id") or "")
    return ids


def _collect_bookmarks(*parts: str) -> tuple[frozenset[str], int]:
    """Collect existing bookmark names and the highest bookmark id."""
    names: set[str] = set()
    max_id = -1
    for part in parts:
        for bookmark in _BOOKMARK_START_RE.finditer(part):
            attrs = bookmark.group(1)
            name = tag_attribute(attrs, "w:name")
            if name:
                names.add(name)
            try:
                max_id = max(max_id, int(tag_attribute(attrs, "w:id") or ""))
            except ValueError:
                pass
    return frozenset(names), max_id


def enumerate_anchors(document_xml: str, footnotes_xml: str, first_note: int = 1) -> AnchorTable:
    """Pair footnote markers in the body with footnote definitions.

    Args:
        document_xml: Text of the body part
        footnotes_xml: Text of the footnotes part
        first_note: Number displayed for the first footnote

    Returns:
        An AnchorTable with one anchor per marker, in document order

    Raises:
        AnchorCountMismatchError: If the two parts disagree on the footnote count
    """
    logger.debug("Enumerating footnote anchors...")

    markers = _find_markers(document_xml)
    definitions = _find_definitions(footnotes_xml)

    if len(markers) != len(definitions):
        raise AnchorCountMismatchError(len(markers), len(definitions))

    anchors = []
    for ordinal, ((footnote_id, start, end, bookmark), definition_id) in enumerate(
        zip(markers, definitions), start=1
    ):
        if footnote_id != definition_id:
            logger.warning(
                "Footnote %d: body marker has id %s but definition has id %s; pairing by order",
                ordinal,
                footnote_id,
                definition_id,
            )
        anchors.append(
            FootnoteAnchor(
                ordinal=ordinal,
                footnote_id=footnote_id,
                definition_id=definition_id,
                marker_start=start,
                marker_end=end,
                existing_bookmark=bookmark,
            )
        )
        logger.debug("Anchor %d -> footnote id %s", ordinal, footnote_id)

    bookmark_names, max_bookmark_id = _collect_bookmarks(document_xml, footnotes_xml)

    logger.debug("Found %d footnote anchors", len(anchors))
    return AnchorTable(
        anchors=tuple(anchors),
        first_note=first_note,
        bookmark_names=bookmark_names,
        max_bookmark_id=max_bookmark_id,
    )


def ref_bookmark_name(number: int) -> str:
    """Create a hidden bookmark name from a number.

    Example:
        >>> ref_bookmark_name(3)
        '_Ref000000003'
    """
    return f"{REF_BOOKMARK_PREFIX}{number:0{REF_BOOKMARK_DIGITS}d}"


def plan_bookmarks(table: AnchorTable, ordinals: Iterable[int]) -> dict[int, BookmarkPlan]:
    """Decide the bookmark each referenced anchor will use.

    Anchors already wrapped by a ``_Ref`` bookmark reuse it. Others get a new
    bookmark named after their ordinal, or after the next unused number when
    that name is taken, with ids continuing after the highest existing id (starting at 1).

    Args:
        table: The anchor table
        ordinals: Ordinals of the anchors that are cross-referenced

    Returns:
        Mapping of ordinal to BookmarkPlan
    """
    taken = set(table.bookmark_names)
    next_id = max(table.max_bookmark_id + 1, 1)
    plans: dict[int, BookmarkPlan] = {}

    for ordinal in sorted(set(ordinals)):
        anchor = table[ordinal]
        if anchor.existing_bookmark is not None:
            logger.debug(
                "Reusing existing bookmark '%s' for footnote %d", anchor.existing_bookmark, ordinal
            )
            plans[ordinal] = BookmarkPlan(ordinal, anchor.existing_bookmark)
            continue

        number = ordinal
        name = ref_bookmark_name(number)
        while name in taken:
            number += 1
            name = ref_bookmark_name(number)
        taken.add(name)

        plans[ordinal] = BookmarkPlan(ordinal, name, next_id)
        logger.debug("Planned bookmark '%s' (id=%d) for footnote %d", name, next_id, ordinal)
        next_id += 1

    return plans
