"""Tests for whole-document conversion."""

import zipfile

import pytest
from docx_factory import (
    document_xml,
    footnote,
    footnoted_parts,
    footnotes_xml,
    italic_run,
    marker,
    paragraph,
    read_part,
    run,
    write_docx,
)
from lxml import etree

from docx_autocref import (
    AnchorCountMismatchError,
    AnchorOutOfRangeError,
    ConversionOptions,
    PackageError,
    convert_docx,
    convert_parts,
    scan_docx,
)
from docx_autocref.constants import w


def footnote_texts(footnotes: str) -> list[str]:
    """Visible text of each user footnote, field results included."""
    root = etree.fromstring(footnotes.encode("utf-8"))
    texts = []
    for note in root.iter(w("footnote")):
        if note.get(w("type")) is None:
            texts.append("".join(t.text or "" for t in note.iter(w("t"))))
    return texts


def noteref_targets(xml: str) -> list[str]:
    root = etree.fromstring(xml.encode("utf-8"))
    return [field.get(w("instr")).split()[1] for field in root.iter(w("fldSimple"))]


class TestConvertParts:
    """Tests for text-in, text-out conversion."""

    def test_single_reference(self):
        """Test '*See* *supra* note 1, at 100.' becomes a field for note 1."""
        body, notes = footnoted_parts(
            (run("First."),),
            (italic_run("See"), run(" "), italic_run("supra"), run(" note 1, at 100.")),
        )
        result = convert_parts(body, notes)

        assert result.anchor_count == 2
        assert result.match_count == 1
        assert result.fields_inserted == 1
        assert result.bookmarks_inserted == 1
        assert noteref_targets(result.footnotes.text) == ["_Ref000000001"]
        assert footnote_texts(result.footnotes.text) == ["First.", "See supra note 1, at 100."]

        root = etree.fromstring(result.document.text.encode("utf-8"))
        start = root.find(f".//{w('bookmarkStart')}")
        assert start.get(w("name")) == "_Ref000000001"
        assert start.getnext().find(w("footnoteReference")).get(w("id")) == "1"

    def test_range_reference(self):
        """Test an en dash range becomes two fields."""
        body, notes = footnoted_parts(
            (run("First."),),
            (run("Second."),),
            (italic_run("See"), run(" "), italic_run("supra"), run(" notes 1\u20132.")),
        )
        result = convert_parts(body, notes)

        assert result.fields_inserted == 2
        assert result.bookmarks_inserted == 2
        assert noteref_targets(result.footnotes.text) == ["_Ref000000001", "_Ref000000002"]
        assert footnote_texts(result.footnotes.text)[2] == "See supra notes 1\u20132."

    def test_two_spaces_unchanged(self):
        """Test '*See* *supra*  note 1.' is left alone."""
        body, notes = footnoted_parts(
            (run("First."),),
            (italic_run("See"), run(" "), italic_run("supra"), run("  note 1.")),
        )
        result = convert_parts(body, notes)
        assert not result.changed
        assert result.document.text == body
        assert result.footnotes.text == notes

    def test_no_phrases_is_byte_identical(self):
        """Test parts without references come back unchanged."""
        body, notes = footnoted_parts((run("First."),), (run("Second, see note 1."),))
        result = convert_parts(body, notes)
        assert result.document.text == body
        assert result.footnotes.text == notes
        assert str(result) == "No cross-references converted (2 footnotes)"

    def test_reference_in_body(self):
        """Test references in body text are converted too."""
        body = document_xml(
            paragraph(run("Text"), marker(1)),
            paragraph(run("As shown "), italic_run("infra"), run(" note 1, more.")),
        )
        notes = footnotes_xml(footnote(1, run("A note.")))
        result = convert_parts(body, notes)
        assert result.document.fields_inserted == 1
        assert result.document.bookmarks_inserted == 1
        assert noteref_targets(result.document.text) == ["_Ref000000001"]

    def test_out_of_range_reference(self):
        """Test a reference to note 50 in a 10-note document is fatal."""
        runs = [(run(f"Note {i}."),) for i in range(1, 10)]
        runs.append((italic_run("supra"), run(" note 50.")))
        body, notes = footnoted_parts(*runs)

        with pytest.raises(AnchorOutOfRangeError) as exc_info:
            convert_parts(body, notes)
        error = exc_info.value
        assert error.number == 50
        assert error.part_name == "word/footnotes.xml"
        assert error.phrase == "supra note 50"
        assert "notes 1-10" in str(error)

    def test_count_mismatch(self):
        """Test a body and footnotes part that disagree are fatal."""
        body = document_xml(paragraph(run("Text"), marker(1)))
        notes = footnotes_xml(footnote(1, run("One.")), footnote(2, run("Two.")))
        with pytest.raises(AnchorCountMismatchError):
            convert_parts(body, notes)

    def test_idempotent(self):
        """Test converting converted parts changes nothing."""
        body, notes = footnoted_parts(
            (run("First."),),
            (run("Second."),),
            (italic_run("supra"), run(" note 1; "), italic_run("infra"), run(" notes 1-2.")),
        )
        first = convert_parts(body, notes)
        second = convert_parts(first.document.text, first.footnotes.text)
        assert not second.changed
        assert second.document.text == first.document.text
        assert second.footnotes.text == first.footnotes.text

    def test_new_reference_reuses_existing_bookmark(self):
        """Test a marker already wrapped in a _Ref bookmark is not wrapped again."""
        body = document_xml(
            paragraph(
                run("Text"),
                '<w:bookmarkStart w:id="3" w:name="_Ref000000001"/>',
                marker(1),
                '<w:bookmarkEnd w:id="3"/>',
            )
        )
        notes = footnotes_xml(footnote(1, italic_run("supra"), run(" note 1.")))
        result = convert_parts(body, notes)
        assert result.bookmarks_inserted == 0
        assert result.document.text == body
        assert noteref_targets(result.footnotes.text) == ["_Ref000000001"]

    def test_first_note_option(self):
        """Test numbering offset selects the right anchor."""
        body, notes = footnoted_parts(
            (run("First."),), (run("Second."),), (italic_run("supra"), run(" note 11."))
        )
        result = convert_parts(body, notes, ConversionOptions(first_note=10))
        assert noteref_targets(result.footnotes.text) == ["_Ref000000002"]

    def test_hyperlink_and_complex_options(self):
        """Test options flow into the generated fields."""
        body, notes = footnoted_parts((run("First."),), (italic_run("supra"), run(" note 1.")))
        options = ConversionOptions(hyperlink=True, field_style="complex")
        result = convert_parts(body, notes, options)
        root = etree.fromstring(result.footnotes.text.encode("utf-8"))
        assert root.find(f".//{w('fldSimple')}") is None
        assert root.find(f".//{w('instrText')}").text == " NOTEREF _Ref000000001 \\h "

    def test_unknown_field_style(self):
        """Test an invalid field style is rejected before any work."""
        body, notes = footnoted_parts((run("First."),))
        with pytest.raises(ValueError):
            convert_parts(body, notes, ConversionOptions(field_style="fancy"))


class TestConvertDocx:
    """Tests for converting .docx files."""

    def test_writes_output(self, tmp_path):
        """Test a converted copy is written and the input is untouched."""
        body, notes = footnoted_parts((run("First."),), (italic_run("supra"), run(" note 1.")))
        source = write_docx(tmp_path / "in.docx", body, notes)
        original = source.read_bytes()
        target = tmp_path / "out.docx"

        result = convert_docx(source, target)

        assert result.fields_inserted == 1
        assert source.read_bytes() == original
        assert noteref_targets(read_part(target, "word/footnotes.xml")) == ["_Ref000000001"]
        assert "_Ref000000001" in read_part(target, "word/document.xml")

    def test_in_place(self, tmp_path):
        """Test the input is overwritten when no output is given."""
        body, notes = footnoted_parts((run("First."),), (italic_run("supra"), run(" note 1.")))
        source = write_docx(tmp_path / "in.docx", body, notes)
        convert_docx(source)
        assert "NOTEREF" in read_part(source, "word/footnotes.xml")

    def test_entry_order_preserved(self, tmp_path):
        """Test the archive entries keep their order."""
        body, notes = footnoted_parts((run("First."),), (italic_run("supra"), run(" note 1.")))
        source = write_docx(tmp_path / "in.docx", body, notes)
        target = tmp_path / "out.docx"
        convert_docx(source, target)
        with zipfile.ZipFile(source) as before, zipfile.ZipFile(target) as after:
            assert before.namelist() == after.namelist()

    def test_out_of_range_writes_nothing(self, tmp_path):
        """Test a failed conversion leaves no output file."""
        runs = [(run(f"Note {i}."),) for i in range(1, 10)]
        runs.append((italic_run("supra"), run(" note 50.")))
        source = write_docx(tmp_path / "in.docx", *footnoted_parts(*runs))
        original = source.read_bytes()
        target = tmp_path / "out.docx"

        with pytest.raises(AnchorOutOfRangeError):
            convert_docx(source, target)
        assert not target.exists()
        assert source.read_bytes() == original

    def test_no_footnotes_part_reference_is_fatal(self, tmp_path):
        """Test a reference in a document without footnotes raises."""
        body = document_xml(paragraph(italic_run("supra"), run(" note 1.")))
        source = write_docx(tmp_path / "in.docx", body)
        target = tmp_path / "out.docx"

        with pytest.raises(AnchorOutOfRangeError) as exc_info:
            convert_docx(source, target)
        assert exc_info.value.part_name == "word/document.xml"
        assert "no footnotes" in str(exc_info.value)
        assert not target.exists()

    def test_no_footnotes_part_markers_are_fatal(self, tmp_path):
        """Test body markers without a footnotes part are a count mismatch."""
        body = document_xml(paragraph(run("Text"), marker(1), marker(2)))
        source = write_docx(tmp_path / "in.docx", body)
        target = tmp_path / "out.docx"

        with pytest.raises(AnchorCountMismatchError):
            convert_docx(source, target)
        assert not target.exists()

    def test_no_footnotes_part_without_references(self, tmp_path):
        """Test a plain document is copied through without gaining a footnotes part."""
        body = document_xml(paragraph(run("Nothing to see.")))
        source = write_docx(tmp_path / "in.docx", body)
        target = tmp_path / "out.docx"

        result = convert_docx(source, target)

        assert not result.changed
        assert read_part(target, "word/document.xml") == body
        with zipfile.ZipFile(target) as zf:
            assert "word/footnotes.xml" not in zf.namelist()

    def test_missing_input(self, tmp_path):
        """Test a missing input raises PackageError."""
        with pytest.raises(PackageError, match="not found"):
            convert_docx(tmp_path / "missing.docx")


class TestScanDocx:
    """Tests for listing references in a .docx file."""

    def test_reports_both_parts(self, tmp_path):
        """Test matches are reported per part, body first."""
        body = document_xml(
            paragraph(run("Text"), marker(1), marker(2)),
            paragraph(italic_run("supra"), run(" note 2.")),
        )
        notes = footnotes_xml(
            footnote(1, italic_run("infra"), run(" notes 1\u20132.")),
            footnote(2, run("Two.")),
        )
        source = write_docx(tmp_path / "in.docx", body, notes)
        original = source.read_bytes()

        found = scan_docx(source)

        assert [(part, str(m.reference)) for part, m in found] == [
            ("word/document.xml", "2"),
            ("word/footnotes.xml", "1\u20132"),
        ]
        assert source.read_bytes() == original
