import tempfile
import unittest
from pathlib import Path
from unittest import mock

from docx import Document
from docx_builders import make_docx, paragraph_texts
from fakes import FakeTemplateProcessor

from taste_docgen import config
from taste_docgen.assembler import Context, DocumentAssembler
from taste_docgen.errors import ExternalProcessError
from taste_docgen.ooxml import document_text


class DocumentAssemblerTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.log_dir = self.root / "logs"
        patcher = mock.patch.object(config, "LOG_DIR", self.log_dir)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self._tmp.cleanup)

    def context(self, **overrides) -> Context:
        values = dict(
            interface_view_path="iv.xml",
            deployment_view_path="dv.xml",
            template_directory=str(self.root),
            temporary_directory=self.root / "scratch",
            template_processor_binary="mock-processor",
        )
        values.update(overrides)
        return Context(**values)

    def log_text(self) -> str:
        logs = sorted(self.log_dir.glob(f"{config.LOG_FILE_PREFIX}_*.log"))
        self.assertEqual(len(logs), 1)
        return logs[0].read_text(encoding="utf-8")

    def test_template_without_hooks_round_trips(self) -> None:
        template = make_docx(self.root / "empty.docx", ["Title", "Some body text", "End"])
        output = self.root / "out" / "empty.docx"

        result = DocumentAssembler(FakeTemplateProcessor()).process_template(self.context(), template, output)

        self.assertEqual(result, output)
        self.assertEqual(document_text(Document(str(output))), document_text(Document(str(template))))
        self.assertIn("hooks_count: 0", self.log_text())

    def test_document_hook_is_spliced_in_place(self) -> None:
        make_docx(self.root / "part.docx", ["P1", "P2"])
        template = make_docx(self.root / "tpl.docx", ["Intro", "<TDG: document part.docx/>", "Outro"])
        output = self.root / "out.docx"

        DocumentAssembler(FakeTemplateProcessor()).process_template(self.context(), template, output)

        self.assertEqual(paragraph_texts(Document(str(output))), ["Intro", "", "P1", "P2", "Outro"])
        self.assertEqual(paragraph_texts(Document(str(template)))[1], "<TDG: document part.docx/>")
        log_text = self.log_text()
        self.assertIn("hooks_count: 1", log_text)
        self.assertIn("hook: document part.docx", log_text)
        self.assertIn("merge: ", log_text)

    def test_template_hooks_run_before_document_hooks(self) -> None:
        make_docx(self.root / "part.docx", ["P1", "P2"])
        template = make_docx(
            self.root / "tpl.docx",
            ["<TDG: document part.docx/>", "<TDG: template gen.tmplt/>"],
        )
        output = self.root / "out.docx"
        runner = FakeTemplateProcessor(outputs={"gen": ["generated", "<TDG: document part.docx/>"]})

        DocumentAssembler(runner).process_template(self.context(target="CubeSat"), template, output)

        self.assertEqual(
            paragraph_texts(Document(str(output))),
            ["", "P1", "P2", "", "generated", "", "P1", "P2"],
        )
        self.assertEqual(len(runner.calls), 1)
        self.assertIn("TARGET=CubeSat", runner.calls[0][1])

    def test_failed_template_hook_writes_error_log(self) -> None:
        template = make_docx(self.root / "tpl.docx", ["<TDG: template gen.tmplt/>"])
        runner = FakeTemplateProcessor(produce=False, stdout="fatal: unknown template")
        assembler = DocumentAssembler(runner)

        with self.assertRaises(ExternalProcessError) as ctx:
            assembler.process_template(self.context(), template, self.root / "out.docx")

        self.assertIn("fatal: unknown template", str(ctx.exception))
        self.assertIsNotNone(assembler.last_log_state.error)
        log_text = self.log_text()
        self.assertIn("error: ", log_text)
        self.assertIn("hook: template gen.tmplt", log_text)
        self.assertEqual(list((self.root / "scratch").iterdir()), [])

    def test_unwritable_log_keeps_original_error(self) -> None:
        template = make_docx(self.root / "tpl.docx", ["<TDG: template gen.tmplt/>"])
        assembler = DocumentAssembler(FakeTemplateProcessor(exit_code=4, stderr="processor crashed"))

        with mock.patch("taste_docgen.assembler.write_log", side_effect=OSError("disk full")):
            with self.assertRaises(ExternalProcessError) as ctx:
                assembler.process_template(self.context(), template, self.root / "out.docx")

        self.assertEqual(ctx.exception.exit_code, 4)
        self.assertIn("processor crashed", str(ctx.exception))
        self.assertEqual(assembler.last_log_state.hooks, ["template gen.tmplt"])

    def test_missing_template(self) -> None:
        with self.assertRaises(FileNotFoundError):
            DocumentAssembler(FakeTemplateProcessor()).process_template(
                self.context(), self.root / "nope.docx", self.root / "out.docx"
            )

    def test_custom_tag(self) -> None:
        make_docx(self.root / "part.docx", ["P1"])
        template = make_docx(self.root / "tpl.docx", ["<DOC: document part.docx/>", "<TDG: document part.docx/>"])
        output = self.root / "out.docx"

        DocumentAssembler(FakeTemplateProcessor()).process_template(self.context(tag="DOC:"), template, output)

        self.assertEqual(paragraph_texts(Document(str(output))), ["", "P1", "<TDG: document part.docx/>"])


if __name__ == "__main__":
    unittest.main()
