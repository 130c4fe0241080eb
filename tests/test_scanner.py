"""Tests for recognizing supra/infra cross-reference phrases."""

import logging

from docx_factory import italic_run, marker, paragraph, run

from docx_autocref.models import Range, Single
from docx_autocref.scanner import find_cross_references, iter_cross_references


def scan(*runs: str):
    return find_cross_references(paragraph(*runs))


class TestSingleReferences:
    """Tests for references to one note."""

    def test_supra_note(self):
        """Test the basic 'supra note N' phrase."""
        matches = scan(run("See "), italic_run("supra"), run(" note 1, at 100."))
        assert len(matches) == 1
        match = matches[0]
        assert match.reference == Single(1)
        assert match.keyword == "supra"
        assert match.plurality == "note"
        assert match.text == "supra note 1"
        assert not match.is_range

    def test_infra_note(self):
        """Test 'infra' is recognized like 'supra'."""
        matches = scan(italic_run("infra"), run(" note 12."))
        assert [m.reference for m in matches] == [Single(12)]
        assert matches[0].keyword == "infra"

    def test_capitalized_keyword(self):
        """Test a sentence-initial 'Supra' is recognized as authored."""
        matches = scan(italic_run("Supra"), run(" note 4."))
        assert matches[0].keyword == "Supra"

    def test_singular_notes_with_one_number(self):
        """Test 'notes' followed by a single number is a Single."""
        matches = scan(italic_run("supra"), run(" notes 7."))
        assert matches[0].reference == Single(7)
        assert matches[0].plurality == "notes"

    def test_no_break_space_before_number(self):
        """Test a no-break space may separate 'note' from the number."""
        matches = scan(italic_run("supra"), run(" note\u00a03"))
        assert [m.reference for m in matches] == [Single(3)]

    def test_several_spaces_before_number(self):
        """Test more than one space may separate 'note' from the number."""
        matches = scan(italic_run("supra"), run(" note   3"))
        assert [m.reference for m in matches] == [Single(3)]

    def test_keyword_split_across_italic_runs(self):
        """Test run boundaries inside the keyword are tolerated."""
        matches = scan(italic_run("su"), italic_run("pra"), run(" note 2"))
        assert [m.reference for m in matches] == [Single(2)]

    def test_number_span_points_at_digits(self):
        """Test the number token's span covers the digits in the raw text."""
        xml = paragraph(italic_run("supra"), run(" note 15."))
        token = find_cross_references(xml)[0].numbers[0]
        assert xml[token.start : token.end] == "15"
        assert token.value == 15


class TestRangeReferences:
    """Tests for references to a span of notes."""

    def test_en_dash_range(self):
        """Test an en dash range yields a Range."""
        matches = scan(run("See "), italic_run("supra"), run(" notes 1\u20132."))
        assert len(matches) == 1
        assert matches[0].reference == Range(1, 2, "\u2013")
        assert matches[0].is_range
        assert [t.value for t in matches[0].numbers] == [1, 2]

    def test_hyphen_range(self):
        """Test a hyphen also separates a range."""
        matches = scan(italic_run("supra"), run(" notes 3-5"))
        assert matches[0].reference == Range(3, 5, "-")

    def test_escaped_en_dash_range(self):
        """Test an en dash written as a character reference."""
        matches = scan(italic_run("infra"), run(" notes 8&#8211;9"))
        assert matches[0].reference == Range(8, 9, "\u2013")

    def test_reversed_range_is_kept(self):
        """Test a range is reported as written even when reversed."""
        matches = scan(italic_run("supra"), run(" notes 5\u20133"))
        assert matches[0].reference == Range(5, 3, "\u2013")

    def test_trailing_dash_is_not_a_range(self):
        """Test a separator not followed by a digit ends the phrase."""
        matches = scan(italic_run("supra"), run(" note 3- and more"))
        assert matches[0].reference == Single(3)
        assert matches[0].text == "supra note 3"

    def test_spaced_dash_is_not_a_range(self):
        """Test whitespace around the separator ends the phrase at the first number."""
        matches = scan(italic_run("supra"), run(" notes 3 \u2013 5"))
        assert matches[0].reference == Single(3)

    def test_range_with_field_end_is_rejected(self):
        """Test a range whose second number is already a field is not matched."""
        matches = scan(
            italic_run("supra"),
            run(" notes 3\u2013"),
            '<w:fldSimple w:instr=" NOTEREF _Ref1 "><w:r><w:t>4</w:t></w:r></w:fldSimple>',
        )
        assert matches == []


class TestRejectedCandidates:
    """Tests for phrases that must not be matched."""

    def test_keyword_not_italic(self):
        """Test a roman 'supra' is ignored."""
        assert scan(run("supra note 3")) == []

    def test_two_spaces_after_keyword(self):
        """Test two spaces after the keyword disqualify the phrase."""
        assert scan(run("See "), italic_run("supra"), run("  note 1.")) == []

    def test_tab_after_keyword(self):
        """Test a tab between keyword and space disqualifies the phrase."""
        assert scan(italic_run("supra"), "<w:r><w:tab/></w:r>", run(" note 1")) == []

    def test_marker_after_keyword(self):
        """Test a footnote mark between keyword and space disqualifies the phrase."""
        assert scan(italic_run("supra"), marker(1), run(" note 1")) == []

    def test_keyword_inside_word(self):
        """Test a keyword preceded by a letter is not a keyword."""
        assert scan(italic_run("xsupra"), run(" note 1")) == []

    def test_note_followed_by_letters(self):
        """Test 'note' must be a whole word."""
        assert scan(italic_run("supra"), run(" notebook 1")) == []

    def test_no_space_before_number(self):
        """Test a number glued to 'note' is rejected."""
        assert scan(italic_run("supra"), run(" note3")) == []

    def test_missing_number(self):
        """Test a phrase with no number is rejected."""
        assert scan(italic_run("supra"), run(" note x")) == []

    def test_number_split_across_runs(self):
        """Test a number spanning two text nodes is rejected."""
        assert scan(italic_run("supra"), run(" note 1"), run("2")) == []

    def test_number_too_long(self):
        """Test a number with more than nine digits is rejected."""
        assert scan(italic_run("supra"), run(" note 1234567890")) == []

    def test_number_already_a_field(self):
        """Test a number inside an existing field is not matched again."""
        xml = (
            italic_run("supra")
            + run(" note ")
            + '<w:fldSimple w:instr=" NOTEREF _Ref000000001 "><w:r><w:t>1</w:t></w:r></w:fldSimple>'
        )
        assert scan(xml) == []

    def test_phrase_across_paragraphs(self):
        """Test a paragraph boundary breaks a phrase."""
        xml = paragraph(italic_run("supra")) + paragraph(run(" note 1"))
        assert find_cross_references(xml) == []

    def test_rejection_is_logged(self, caplog):
        """Test rejected candidates are reported at debug level."""
        with caplog.at_level(logging.DEBUG, logger="docx_autocref.scanner"):
            scan(italic_run("supra"), run(" note x"))
        assert "expected a note number" in caplog.text


class TestScanOrder:
    """Tests for ordering and restartability."""

    def test_multiple_matches_in_source_order(self):
        """Test several phrases in one part are reported left to right."""
        xml = paragraph(
            italic_run("supra"), run(" note 1; "), italic_run("infra"), run(" notes 4\u20135.")
        ) + paragraph(run("Compare "), italic_run("supra"), run(" note 2."))
        matches = find_cross_references(xml)
        assert [str(m.reference) for m in matches] == ["1", "4\u20135", "2"]
        assert [m.paragraph for m in matches] == [0, 0, 1]
        assert matches[0].start < matches[1].start < matches[2].start

    def test_scanning_resumes_after_rejection(self):
        """Test a rejected candidate does not hide a later phrase."""
        matches = scan(italic_run("supra"), run("  note 1; "), italic_run("infra"), run(" note 2."))
        assert [m.reference for m in matches] == [Single(2)]

    def test_scanning_is_restartable(self):
        """Test scanning the same text twice gives the same matches."""
        xml = paragraph(italic_run("supra"), run(" notes 1-2"))
        assert list(iter_cross_references(xml)) == list(iter_cross_references(xml))

    def test_text_without_phrases(self):
        """Test ordinary text yields nothing."""
        assert scan(run("No references here. Note 3 is ordinary.")) == []
