"""
Conversion of static footnote cross-references into NOTEREF fields.

The converter ties the pieces together for a whole document:

1. enumerate the footnote anchors from both parts,
2. scan both parts for "*supra*/*infra* note(s) N[–N]" phrases,
3. resolve every referenced number against the anchors,
4. plan one bookmark per referenced footnote,
5. rewrite both parts,
6. verify the rewritten parts are well-formed and write the package.

Nothing is written unless every step succeeds.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from lxml import etree

from .anchors import enumerate_anchors, plan_bookmarks
from .constants import DOCUMENT_PART, FIELD_STYLE_SIMPLE, FOOTNOTES_PART
from .errors import RewriteError
from .field_xml import FieldXMLGenerator
from .models.cross_reference import CrossReferenceMatch
from .package import OOXMLPackage
from .results import ConversionResult
from .rewriter import FieldRewriter, referenced_ordinals
from .scanner import find_cross_references

logger = logging.getLogger(__name__)


@dataclass
class ConversionOptions:
    """Options controlling how cross-references are converted.

    Attributes:
        hyperlink: Add the ``\\h`` switch so references link to their footnote
        field_style: "simple" (``w:fldSimple``) or "complex" (fldChar runs)
        first_note: Number displayed for the first footnote
        mark_dirty: Ask Word to recalculate the fields when the document opens
        document_part: Name of the body part in the package
        footnotes_part: Name of the footnotes part in the package
    """

    hyperlink: bool = False
    field_style: str = FIELD_STYLE_SIMPLE
    first_note: int = 1
    mark_dirty: bool = False
    document_part: str = DOCUMENT_PART
    footnotes_part: str = FOOTNOTES_PART

    def create_generator(self) -> FieldXMLGenerator:
        return FieldXMLGenerator(
            field_style=self.field_style,
            hyperlink=self.hyperlink,
            mark_dirty=self.mark_dirty,
        )


def convert_parts(
    document_xml: str,
    footnotes_xml: str,
    options: ConversionOptions | None = None,
) -> ConversionResult:
    """Convert the cross-references in the body and footnotes parts.

    Both parts are scanned and every referenced number is resolved before
    either part is rewritten, so an error leaves no partial result.

    Args:
        document_xml: Text of the body part
        footnotes_xml: Text of the footnotes part
        options: Conversion options (defaults used if None)

    Returns:
        ConversionResult holding the rewritten text of both parts

    Raises:
        AnchorCountMismatchError: If the parts disagree on the footnote count
        AnchorOutOfRangeError: If a cross-reference has no matching footnote
        RewriteError: If the edits for a part cannot be applied
        ValueError: If the options name an unknown field style
    """
    options = options or ConversionOptions()
    generator = options.create_generator()

    table = enumerate_anchors(document_xml, footnotes_xml, options.first_note)

    document_matches = find_cross_references(document_xml)
    footnote_matches = find_cross_references(footnotes_xml)
    logger.info(
        "Found %d cross-references in %s and %d in %s (%d footnotes)",
        len(document_matches),
        options.document_part,
        len(footnote_matches),
        options.footnotes_part,
        len(table),
    )

    ordinals = referenced_ordinals(table, document_matches, options.document_part)
    ordinals |= referenced_ordinals(table, footnote_matches, options.footnotes_part)
    bookmarks = plan_bookmarks(table, ordinals)

    rewriter = FieldRewriter(table, bookmarks, generator)
    document = rewriter.rewrite(
        document_xml, document_matches, options.document_part, insert_bookmarks=True
    )
    footnotes = rewriter.rewrite(footnotes_xml, footnote_matches, options.footnotes_part)

    return ConversionResult(document=document, footnotes=footnotes, anchor_count=len(table))


def verify_well_formed(xml_text: str, part_name: str) -> None:
    """Check that a rewritten part still parses as XML.

    Raises:
        RewriteError: If the text is not well-formed
    """
    try:
        etree.fromstring(xml_text.encode("utf-8"))
    except etree.XMLSyntaxError as e:
        raise RewriteError(part_name, f"not well-formed XML: {e}") from e


def convert_docx(
    input_path: str | Path,
    output_path: str | Path | None = None,
    options: ConversionOptions | None = None,
) -> ConversionResult:
    """Convert the cross-references in a .docx file.

    Args:
        input_path: Path to the source document
        output_path: Where to write the result (defaults to overwriting the input)
        options: Conversion options (defaults used if None)

    Returns:
        ConversionResult describing what was converted

    Raises:
        PackageError: If the document cannot be read or written
        AnchorCountMismatchError: If the parts disagree on the footnote count
        AnchorOutOfRangeError: If a cross-reference has no matching footnote
        RewriteError: If a rewritten part is not well-formed

    Example:
        >>> result = convert_docx("article.docx", "article-linked.docx")
        >>> print(result)
    """
    options = options or ConversionOptions()
    input_path = Path(input_path)
    output_path = Path(output_path) if output_path is not None else input_path

    with OOXMLPackage.open(input_path) as package:
        document_xml = package.get_part_text(options.document_part)

        has_footnotes = package.part_exists(options.footnotes_part)
        if has_footnotes:
            footnotes_xml = package.get_part_text(options.footnotes_part)
        else:
            # No definitions: body markers or references still have to be rejected
            logger.info("%s has no %s", input_path, options.footnotes_part)
            footnotes_xml = ""
        result = convert_parts(document_xml, footnotes_xml, options)

        for part in result.parts:
            if part.part_name == options.footnotes_part and not has_footnotes:
                continue
            if part.changed:
                verify_well_formed(part.text, part.part_name)
                package.set_part_text(part.part_name, part.text)

        if package.modified or output_path != input_path:
            package.save(output_path)
            logger.info("Wrote %s", output_path)

    logger.info("%s", result)
    return result


def scan_docx(
    input_path: str | Path, options: ConversionOptions | None = None
) -> list[tuple[str, CrossReferenceMatch]]:
    """List the cross-references in a .docx file without changing it.

    Returns:
        (part_name, match) pairs, body part first, each in source order
    """
    options = options or ConversionOptions()
    found: list[tuple[str, CrossReferenceMatch]] = []

    with OOXMLPackage.open(input_path) as package:
        for part_name in (options.document_part, options.footnotes_part):
            if not package.part_exists(part_name):
                continue
            for match in find_cross_references(package.get_part_text(part_name)):
                found.append((part_name, match))

    return found
