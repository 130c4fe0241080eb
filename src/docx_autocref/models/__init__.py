"""
Model classes for docx_autocref.

These dataclasses describe what the scanner finds and what the anchor
enumerator builds; they hold no references to parsed XML.
"""

from docx_autocref.models.anchor import AnchorTable, BookmarkPlan, FootnoteAnchor
from docx_autocref.models.cross_reference import (
    CrossReference,
    CrossReferenceMatch,
    NumberToken,
    Range,
    Single,
)

__all__ = [
    "AnchorTable",
    "BookmarkPlan",
    "FootnoteAnchor",
    "CrossReference",
    "CrossReferenceMatch",
    "NumberToken",
    "Range",
    "Single",
]
