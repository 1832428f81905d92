import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from docx_builders import (
    add_abstract_numbering,
    add_numbering_instance,
    add_picture,
    add_style,
    add_styled_paragraph,
    drop_numbering,
    image_rels,
    make_bodyless_docx,
    new_document,
    paragraph_texts,
    save_document,
)

from taste_docgen.merge_engine import insert_document
from taste_docgen.ooxml import NS, R_EMBED, W_SECTPR, W_VAL, body_of
from taste_docgen.run_log import RunLogState


def _log_state() -> RunLogState:
    return RunLogState(template_path=Path("t.docx"), output_path=Path("o.docx"), start_time=datetime.now())


class InsertDocumentTests(unittest.TestCase):
    def test_splices_body_after_anchor_in_order(self) -> None:
        target = new_document(["Before", "<TDG: document part.docx/>", "After"])
        anchor = target.paragraphs[1]
        with tempfile.TemporaryDirectory() as tmpdir:
            source_path = save_document(new_document(["One", "Two", "Three"]), Path(tmpdir) / "part.docx")

            report = insert_document(target, source_path, anchor)

        self.assertEqual(report.inserted, 3)
        self.assertEqual(paragraph_texts(target), ["Before", "", "One", "Two", "Three", "After"])
        body = body_of(target)
        self.assertEqual(len(body.findall("w:sectPr", namespaces=NS)), 1)
        self.assertEqual(body[-1].tag, W_SECTPR)

    def test_rewrites_references_of_spliced_content(self) -> None:
        target = new_document(["anchor"])
        add_abstract_numbering(target, 0)
        add_numbering_instance(target, 1, 0)

        source = new_document()
        drop_numbering(source)
        add_abstract_numbering(source, 0)
        add_numbering_instance(source, 1, 0)
        add_style(source, "SourceOnly")
        add_styled_paragraph(source, "numbered", style_id="Normal", num_id=1)
        add_styled_paragraph(source, "custom", style_id="SourceOnly")
        add_picture(source, seed=5)

        with tempfile.TemporaryDirectory() as tmpdir:
            source_path = save_document(source, Path(tmpdir) / "source.docx")
            report = insert_document(target, source_path, target.paragraphs[0])

        paragraphs = target.paragraphs
        numbered = paragraphs[1]._p
        self.assertEqual(
            numbered.find("w:pPr/w:pStyle", namespaces=NS).get(W_VAL),
            report.maps.styles["Normal"],
        )
        self.assertEqual(
            numbered.find("w:pPr/w:numPr/w:numId", namespaces=NS).get(W_VAL),
            str(report.maps.numbering[1]),
        )
        self.assertEqual(paragraphs[2]._p.find("w:pPr/w:pStyle", namespaces=NS).get(W_VAL), "SourceOnly")

        target_images = image_rels(target)
        blips = list(body_of(target).iterfind(".//a:blip", namespaces=NS))
        self.assertEqual(len(blips), 1)
        self.assertIn(blips[0].get(R_EMBED), target_images)

    def test_source_without_body_is_logged_and_skipped(self) -> None:
        target = new_document(["keep", "<TDG: document empty.docx/>"])
        log_state = _log_state()
        with tempfile.TemporaryDirectory() as tmpdir:
            source_path = make_bodyless_docx(Path(tmpdir) / "empty.docx")

            report = insert_document(target, source_path, target.paragraphs[1], log_state)

        self.assertEqual(report.inserted, 0)
        self.assertEqual(paragraph_texts(target), ["keep", ""])
        self.assertEqual([w.rule for w in log_state.warnings], ["merge"])

    def test_invalid_source_raises_value_error(self) -> None:
        target = new_document(["anchor"])
        with tempfile.TemporaryDirectory() as tmpdir:
            bogus = Path(tmpdir) / "bogus.docx"
            bogus.write_text("not a zip", encoding="utf-8")

            with self.assertRaises(ValueError):
                insert_document(target, bogus, target.paragraphs[0])

    def test_report_summary(self) -> None:
        target = new_document(["anchor"])
        with tempfile.TemporaryDirectory() as tmpdir:
            source_path = save_document(new_document(["x"]), Path(tmpdir) / "x.docx")
            report = insert_document(target, source_path, target.paragraphs[0])

        self.assertIn("inserted=1", report.summary())
        self.assertIn("x.docx", report.summary())


if __name__ == "__main__":
    unittest.main()
