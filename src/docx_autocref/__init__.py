"""
docx_autocref - Turn static footnote cross-references in Word documents into NOTEREF fields.

Legal and academic writing refers back to earlier footnotes with phrases such
as "*supra* note 3". This package finds those phrases in a .docx file and
replaces the numbers with fields that Word keeps in step with the footnote
numbering.

Example:
    >>> from docx_autocref import convert_docx
    >>> result = convert_docx("article.docx", "article-linked.docx")
    >>> print(result)
"""

__version__ = "0.1.0"
__all__ = [
    "convert_docx",
    "convert_parts",
    "scan_docx",
    "ConversionOptions",
    "ConversionResult",
    "PartResult",
    "OOXMLPackage",
    "FieldXMLGenerator",
    "FieldRewriter",
    "enumerate_anchors",
    "plan_bookmarks",
    "find_cross_references",
    "iter_cross_references",
    "AnchorTable",
    "BookmarkPlan",
    "FootnoteAnchor",
    "CrossReferenceMatch",
    "NumberToken",
    "Range",
    "Single",
    "AutocrefError",
    "AnchorCountMismatchError",
    "AnchorOutOfRangeError",
    "RewriteError",
    "PackageError",
]

from .anchors import enumerate_anchors, plan_bookmarks
from .converter import ConversionOptions, convert_docx, convert_parts, scan_docx
from .errors import (
    AnchorCountMismatchError,
    AnchorOutOfRangeError,
    AutocrefError,
    PackageError,
    RewriteError,
)
from .field_xml import FieldXMLGenerator
from .models import (
    AnchorTable,
    BookmarkPlan,
    CrossReferenceMatch,
    FootnoteAnchor,
    NumberToken,
    Range,
    Single,
)
from .package import OOXMLPackage
from .results import ConversionResult, PartResult
from .rewriter import FieldRewriter
from .scanner import find_cross_references, iter_cross_references
