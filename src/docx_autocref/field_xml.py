"""
XML generation for footnote cross-reference fields and their bookmarks.

This module provides the FieldXMLGenerator class, which produces the OOXML
strings the rewriter splices into a part. Everything is generated as text so
it can be inserted without reserializing the surrounding markup.

The Markup for Cross-References
-------------------------------

A numeral sits in the middle of a ``<w:t>``, so the text node and run must be
closed before the field and reopened after it, with the original run
properties on both sides::

    </w:t></w:r>
    <w:fldSimple w:instr=" NOTEREF _Ref000000001 ">
      <w:r><w:rPr>...</w:rPr><w:t>1</w:t></w:r>
    </w:fldSimple>
    <w:r><w:rPr>...</w:rPr><w:t xml:space="preserve">

The complex form (begin, instruction, separate, result, end) is what Word
itself writes and is available as an alternative.
"""

import re

from .constants import (
    FIELD_STYLE_COMPLEX,
    FIELD_STYLE_SIMPLE,
    FIELD_STYLES,
    NOTEREF_FIELD,
)


class FieldXMLGenerator:
    """Generates NOTEREF field fragments and bookmark tags.

    Attributes:
        field_style: "simple" for ``<w:fldSimple>``, "complex" for fldChar runs
        hyperlink: Add the ``\\h`` switch so the reference links to the note
        mark_dirty: Set ``w:dirty`` so Word recalculates the field on open
    """

    def __init__(
        self,
        field_style: str = FIELD_STYLE_SIMPLE,
        hyperlink: bool = False,
        mark_dirty: bool = False,
    ) -> None:
        if field_style not in FIELD_STYLES:
            valid_options = ", ".join(FIELD_STYLES)
            raise ValueError(f"Unknown field style '{field_style}'. Valid options: {valid_options}")
        self.field_style = field_style
        self.hyperlink = hyperlink
        self.mark_dirty = mark_dirty

    def instruction(self, bookmark_name: str) -> str:
        """Build the field instruction for a bookmark.

        Example:
            >>> FieldXMLGenerator(hyperlink=True).instruction("_Ref000000002")
            ' NOTEREF _Ref000000002 \\\\h '
        """
        if self.hyperlink:
            return f" {NOTEREF_FIELD} {bookmark_name} \\h "
        return f" {NOTEREF_FIELD} {bookmark_name} "

    def create_field(self, number_text: str, bookmark_name: str, run_properties: str = "") -> str:
        """Generate the fragment that replaces a numeral inside a text node.

        Args:
            number_text: The numeral as it appears in the text (the cached result)
            bookmark_name: Bookmark wrapping the referenced footnote marker
            run_properties: Raw ``<w:rPr>`` of the run holding the numeral

        Returns:
            OOXML that closes the current run, emits the field, and reopens a
            run with the same properties and an open ``<w:t>``
        """
        if self.field_style == FIELD_STYLE_COMPLEX:
            field = self._create_complex_field(number_text, bookmark_name, run_properties)
        else:
            field = self._create_simple_field(number_text, bookmark_name, run_properties)
        return f'</w:t></w:r>{field}<w:r>{run_properties}<w:t xml:space="preserve">'

    def _create_simple_field(self, number_text: str, bookmark_name: str, run_properties: str) -> str:
        """Generate a ``<w:fldSimple>`` element."""
        instr = self._escape_xml(self.instruction(bookmark_name))
        dirty = ' w:dirty="true"' if self.mark_dirty else ""
        return (
            f'<w:fldSimple w:instr="{instr}"{dirty}>'
            f"<w:r>{run_properties}<w:t>{self._escape_xml(number_text)}</w:t></w:r>"
            f"</w:fldSimple>"
        )

    def _create_complex_field(
        self, number_text: str, bookmark_name: str, run_properties: str
    ) -> str:
        """Generate the begin/instruction/separate/result/end run sequence."""
        instr = self._escape_xml(self.instruction(bookmark_name))
        dirty = ' w:dirty="true"' if self.mark_dirty else ""
        rpr = run_properties
        return (
            f'<w:r>{rpr}<w:fldChar w:fldCharType="begin"{dirty}/></w:r>'
            f'<w:r>{rpr}<w:instrText xml:space="preserve">{instr}</w:instrText></w:r>'
            f'<w:r>{rpr}<w:fldChar w:fldCharType="separate"/></w:r>'
            f"<w:r>{rpr}<w:t>{self._escape_xml(number_text)}</w:t></w:r>"
            f'<w:r>{rpr}<w:fldChar w:fldCharType="end"/></w:r>'
        )

    @staticmethod
    def bookmark_start(bookmark_id: int, name: str) -> str:
        """Generate a ``<w:bookmarkStart>`` tag."""
        return f'<w:bookmarkStart w:id="{bookmark_id}" w:name="{name}"/>'

    @staticmethod
    def bookmark_end(bookmark_id: int) -> str:
        """Generate a ``<w:bookmarkEnd>`` tag."""
        return f'<w:bookmarkEnd w:id="{bookmark_id}"/>'

    @staticmethod
    def preserve_space_tag(tag: str) -> str:
        """Add ``xml:space="preserve"`` to an opening ``<w:t>`` tag.

        Splitting a text node can leave trailing whitespace before the field,
        which Word drops unless the node preserves space.

        Example:
            >>> FieldXMLGenerator.preserve_space_tag("<w:t>")
            '<w:t xml:space="preserve">'
        """
        if "xml:space" in tag:
            return re.sub(r"xml:space\s*=\s*(\"[^\"]*\"|'[^']*')", 'xml:space="preserve"', tag)
        return f'{tag[:-1].rstrip()} xml:space="preserve">'

    @staticmethod
    def _escape_xml(text: str) -> str:
        """Escape XML special characters.

        Args:
            text: Raw text to escape

        Returns:
            XML-safe text
        """
        return (
            text.replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace('"', "&quot;")
            .replace("'", "&apos;")
        )
