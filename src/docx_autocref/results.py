"""
Result classes for conversions.

These track what a conversion found and changed in each document part.
"""

from dataclasses import dataclass, field

from .models.cross_reference import CrossReferenceMatch


@dataclass
class PartResult:
    """Result of rewriting one document part.

    Attributes:
        part_name: Package part name (e.g., "word/footnotes.xml")
        text: The rewritten part text
        matches: Cross-references found in the part
        fields_inserted: Number of NOTEREF fields spliced in
        bookmarks_inserted: Number of new bookmarks wrapped around footnote markers
    """

    part_name: str
    text: str
    matches: list[CrossReferenceMatch] = field(default_factory=list)
    fields_inserted: int = 0
    bookmarks_inserted: int = 0

    @property
    def changed(self) -> bool:
        return self.fields_inserted > 0 or self.bookmarks_inserted > 0

    def __str__(self) -> str:
        """Get string representation of the result."""
        refs = len(self.matches)
        return (
            f"{self.part_name}: {refs} cross-reference{'s' if refs != 1 else ''}, "
            f"{self.fields_inserted} field{'s' if self.fields_inserted != 1 else ''}, "
            f"{self.bookmarks_inserted} bookmark{'s' if self.bookmarks_inserted != 1 else ''}"
        )


@dataclass
class ConversionResult:
    """Result of converting a whole document.

    Attributes:
        document: Result for the body part
        footnotes: Result for the footnotes part
        anchor_count: Number of footnotes in the document

    Example:
        >>> result = convert_docx("article.docx")
        >>> print(f"Inserted {result.fields_inserted} fields")
    """

    document: PartResult
    footnotes: PartResult
    anchor_count: int = 0

    @property
    def parts(self) -> tuple[PartResult, PartResult]:
        return (self.document, self.footnotes)

    @property
    def match_count(self) -> int:
        return sum(len(part.matches) for part in self.parts)

    @property
    def fields_inserted(self) -> int:
        return sum(part.fields_inserted for part in self.parts)

    @property
    def bookmarks_inserted(self) -> int:
        return sum(part.bookmarks_inserted for part in self.parts)

    @property
    def changed(self) -> bool:
        return any(part.changed for part in self.parts)

    def __str__(self) -> str:
        """Get string representation of the result."""
        if not self.changed:
            return f"No cross-references converted ({self.anchor_count} footnotes)"
        return (
            f"Converted {self.match_count} cross-references into {self.fields_inserted} "
            f"fields and added {self.bookmarks_inserted} bookmarks ({self.anchor_count} footnotes)"
        )
