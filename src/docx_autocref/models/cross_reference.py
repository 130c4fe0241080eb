"""
Cross-reference model classes for docx_autocref.

A cross-reference phrase such as "*supra* notes 3–5" is reported by the
scanner as a CrossReferenceMatch carrying the parsed reference (Single or
Range) and the raw-text location of each numeral so the rewriter can splice
fields over them.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Single:
    """A reference to one footnote, as in "note 3"."""

    number: int

    @property
    def numbers(self) -> tuple[int, ...]:
        return (self.number,)

    def __str__(self) -> str:
        return str(self.number)


@dataclass(frozen=True)
class Range:
    """A reference to a span of footnotes, as in "notes 3–5".

    The scanner passes through whatever numbers appear, so ``start`` may be
    greater than ``end``.
    """

    start: int
    end: int
    separator: str = "\u2013"

    @property
    def numbers(self) -> tuple[int, ...]:
        return (self.start, self.end)

    def __str__(self) -> str:
        return f"{self.start}{self.separator}{self.end}"


CrossReference = Single | Range


@dataclass(frozen=True)
class NumberToken:
    """A numeral inside a matched phrase.

    Attributes:
        value: The parsed footnote number
        start: Offset of the first digit in the raw part text
        end: Offset just past the last digit in the raw part text
        run_properties: Raw ``<w:rPr>`` markup of the run holding the numeral
            (empty string if the run has none)
        tag_start: Offset of the opening ``<w:t>`` tag of the numeral's text node
        tag_end: Offset just past that opening tag
        preserve_space: Whether that text node preserves whitespace
    """

    value: int
    start: int
    end: int
    run_properties: str = ""
    tag_start: int = -1
    tag_end: int = -1
    preserve_space: bool = True


@dataclass(frozen=True)
class CrossReferenceMatch:
    """One occurrence of the cross-reference grammar in a document part.

    Attributes:
        start: Offset in the raw part text where the keyword begins
        end: Offset in the raw part text just past the last numeral
        keyword: "supra" or "infra", as authored (may be capitalized)
        plurality: "note" or "notes"
        reference: The parsed Single or Range
        numbers: One NumberToken per numeral, in source order
        text: The matched phrase as plain text (e.g. "supra note 3")
        paragraph: Zero-based index of the paragraph containing the match
    """

    start: int
    end: int
    keyword: str
    plurality: str
    reference: CrossReference
    numbers: tuple[NumberToken, ...]
    text: str
    paragraph: int = 0

    @property
    def is_range(self) -> bool:
        return isinstance(self.reference, Range)

    def to_dict(self) -> dict:
        """Plain representation used by the CLI's scan report."""
        data = {
            "text": self.text,
            "keyword": self.keyword,
            "plurality": self.plurality,
            "paragraph": self.paragraph,
            "span": [self.start, self.end],
        }
        if isinstance(self.reference, Range):
            data["range"] = [self.reference.start, self.reference.end]
        else:
            data["note"] = self.reference.number
        return data
