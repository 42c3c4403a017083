import os
import unittest

from fluxcheck.config import Settings


class TestSettings(unittest.TestCase):

    def test_defaults(self):
        s = Settings(_env_file=None)
        self.assertEqual(s.ALERTS_PACKAGE, "influxdata/influxdb/alerts")
        self.assertEqual(s.THRESHOLD_FILE_NAME, "threshold.flux")
        self.assertFalse(s.PARSE_DEBUG)

    def test_env_override(self):
        os.environ["FLUXCHECK_PARSE_DEBUG"] = "true"
        os.environ["FLUXCHECK_THRESHOLD_FILE_NAME"] = "generated.flux"
        s = Settings(_env_file=None)
        self.assertTrue(s.PARSE_DEBUG)
        self.assertEqual(s.THRESHOLD_FILE_NAME, "generated.flux")


if __name__ == "__main__":
    unittest.main()
