import tempfile
import unittest
from pathlib import Path

from taste_docgen.deployment_view import get_target_name

DV_XML = """<?xml version="1.0"?>
<DeploymentView>
  <Partition id="{p1}" name="PartitionA">
    <Function id="{f1}" name="F1" />
    <Function id="{f2}" name="F2" />
  </Partition>
  <Partition id="p2" name="PartitionB">
    <Function id="{f3}" name="F3" />
  </Partition>
</DeploymentView>
"""


class GetTargetNameTests(unittest.TestCase):
    def _write(self, tmpdir: str, text: str) -> Path:
        path = Path(tmpdir) / "dv.xml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_partition_with_most_functions(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            self.assertEqual(get_target_name(self._write(tmpdir, DV_XML)), "PartitionA")

    def test_namespaced_and_case_insensitive(self) -> None:
        xml = (
            '<dv:DeploymentView xmlns:dv="urn:taste:dv">'
            '<dv:partition name="Small"><dv:function/></dv:partition>'
            '<dv:PARTITION name="Big"><node><dv:Function/><dv:FUNCTION/></node></dv:PARTITION>'
            "</dv:DeploymentView>"
        )
        with tempfile.TemporaryDirectory() as tmpdir:
            self.assertEqual(get_target_name(self._write(tmpdir, xml)), "Big")

    def test_tie_keeps_first(self) -> None:
        xml = '<DV><Partition name="First"/><Partition name="Second"/></DV>'
        with tempfile.TemporaryDirectory() as tmpdir:
            self.assertEqual(get_target_name(self._write(tmpdir, xml)), "First")

    def test_no_result(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            self.assertIsNone(get_target_name(self._write(tmpdir, "<DV><Node/></DV>")))
            self.assertIsNone(get_target_name(self._write(tmpdir, "<DV><Partition")))
            self.assertIsNone(get_target_name(Path(tmpdir) / "missing.xml"))
        self.assertIsNone(get_target_name(""))
        self.assertIsNone(get_target_name(None))


if __name__ == "__main__":
    unittest.main()
