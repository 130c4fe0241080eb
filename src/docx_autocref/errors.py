"""
Custom exception classes for the docx_autocref package.

Malformed cross-reference candidates are never errors; they are simply not
matched. The exceptions here cover the structural problems that make any
field target unreliable, so they abort the whole conversion.
"""


class AutocrefError(Exception):
    """Base exception for all docx_autocref errors."""

    pass


class AnchorCountMismatchError(AutocrefError):
    """Raised when the body and footnotes parts disagree on the footnote count.

    The Nth footnote marker in the body is paired with the Nth footnote
    definition, so unequal counts mean every computed field target would be
    suspect.

    Attributes:
        body_count: Number of footnote reference markers in the body part
        footnote_count: Number of footnote definitions in the footnotes part
    """

    def __init__(self, body_count: int, footnote_count: int) -> None:
        self.body_count = body_count
        self.footnote_count = footnote_count
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format an error message with both counts."""
        return (
            f"Footnote count mismatch: the body has {self.body_count} footnote "
            f"reference(s) but the footnotes part defines {self.footnote_count}. "
            "The document may have been edited outside the generating pipeline."
        )


class AnchorOutOfRangeError(AutocrefError):
    """Raised when a cross-reference points at a footnote that does not exist.

    Attributes:
        number: The footnote number that was referenced
        part_name: The document part containing the reference
        phrase: The matched cross-reference text
        anchor_count: Number of footnotes in the document
        first_note: Number of the first footnote
    """

    def __init__(
        self,
        number: int,
        part_name: str,
        phrase: str,
        anchor_count: int,
        first_note: int = 1,
    ) -> None:
        self.number = number
        self.part_name = part_name
        self.phrase = phrase
        self.anchor_count = anchor_count
        self.first_note = first_note
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format an error message naming the part and the phrase."""
        msg = f"Cross-reference '{self.phrase}' in {self.part_name} refers to note {self.number}"
        if self.anchor_count:
            last = self.first_note + self.anchor_count - 1
            msg += f", but the document only has notes {self.first_note}-{last}"
        else:
            msg += ", but the document has no footnotes"
        return msg


class RewriteError(AutocrefError):
    """Raised when a part cannot be rewritten cleanly.

    This covers overlapping edits and rewritten text that is no longer
    well-formed XML.

    Attributes:
        part_name: The document part being rewritten
        reason: Description of the failure
    """

    def __init__(self, part_name: str, reason: str) -> None:
        self.part_name = part_name
        self.reason = reason
        super().__init__(f"Cannot rewrite {part_name}: {reason}")


class PackageError(AutocrefError):
    """Raised when the .docx container cannot be read or written.

    This can occur when:
    - The input file does not exist or is not a ZIP archive
    - A required part is missing
    - The output cannot be written
    """

    pass
