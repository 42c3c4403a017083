"""
Command line tests.
"""
import io
import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from fluxcheck.cli import main


CHECK = {
    "type": "threshold",
    "id": "020f755c3c082000",
    "name": "moo",
    "query": {"text": 'data = from(bucket: "foo") |> range(start: -1d)'},
    "statusMessageTemplate": "whoa!",
    "tags": [{"key": "aaa", "value": "vaaa"}],
    "thresholds": [{"level": "CRIT", "upperBound": 5}],
}


class TestCLI(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def write(self, name, content):
        path = os.path.join(self.tmpdir, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def run_cli(self, *argv):
        with patch("sys.stdout", new_callable=io.StringIO) as out, \
                patch("sys.stderr", new_callable=io.StringIO) as err:
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_compile_to_stdout(self):
        path = self.write("check.json", json.dumps(CHECK))
        code, out, _ = self.run_cli("compile", path)
        self.assertEqual(code, 0)
        self.assertTrue(out.startswith('import "influxdata/influxdb/alerts"\n'))
        self.assertIn("crit = (r) => r._value < 5.0\n", out)

    def test_compile_to_file(self):
        path = self.write("check.json", json.dumps(CHECK))
        target = os.path.join(self.tmpdir, "out.flux")
        code, out, _ = self.run_cli("compile", path, "-o", target)
        self.assertEqual(code, 0)
        self.assertEqual(out, "")
        with open(target, encoding="utf-8") as f:
            script = f.read()
        self.assertTrue(script.endswith("crit: crit)\n"))

    def test_compile_syntax_error(self):
        doc = dict(CHECK, query={"text": "data = ) 3"})
        path = self.write("check.json", json.dumps(doc))
        code, _, err = self.run_cli("compile", path)
        self.assertEqual(code, 1)
        self.assertIn("Error [invalid]", err)
        self.assertIn("error @1:8", err)

    def test_validate(self):
        path = self.write("check.json", json.dumps(CHECK))
        code, out, _ = self.run_cli("validate", path)
        self.assertEqual(code, 0)
        self.assertIn("threshold check 'moo' is valid", out)

    def test_validate_invalid(self):
        path = self.write("check.json", json.dumps(dict(CHECK, id="")))
        code, _, err = self.run_cli("validate", path)
        self.assertEqual(code, 1)
        self.assertIn("Check ID is invalid", err)

    def test_fmt(self):
        path = self.write("query.flux", "x=1+2\n")
        code, out, _ = self.run_cli("fmt", path)
        self.assertEqual(code, 0)
        self.assertEqual(out, "x = 1 + 2\n")

    def test_missing_file(self):
        code, _, err = self.run_cli("validate", os.path.join(self.tmpdir, "nope.json"))
        self.assertEqual(code, 1)
        self.assertIn("Error", err)


if __name__ == "__main__":
    unittest.main()
