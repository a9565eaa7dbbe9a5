import ssl
import unittest

import requests

from tests.fakes import FakeSession
from winget_bootstrap.lib.net import TLSAdapter, downloaded, make_session, parse_tls_version


class TestSession(unittest.TestCase):
    def test_https_adapter_enforces_minimum_tls(self):
        session = make_session(min_tls="1.2")
        try:
            adapter = session.get_adapter("https://aka.ms/getwinget")
            self.assertIsInstance(adapter, TLSAdapter)
            self.assertEqual(adapter.ssl_context.minimum_version, ssl.TLSVersion.TLSv1_2)
        finally:
            session.close()

    def test_unknown_tls_version(self):
        with self.assertRaises(ValueError):
            parse_tls_version("1.0")


class TestDownloaded(unittest.TestCase):
    def test_file_removed_after_block(self):
        with downloaded(FakeSession(), "https://example.test/a.appx", suffix=".appx") as tmp:
            self.assertEqual(tmp.read_bytes(), b"payload:https://example.test/a.appx")
            self.assertEqual(tmp.suffix, ".appx")
        self.assertFalse(tmp.exists())

    def test_file_removed_when_block_raises(self):
        with self.assertRaises(RuntimeError):
            with downloaded(FakeSession(), "https://example.test/a.appx") as tmp:
                raise RuntimeError("install failed")
        self.assertFalse(tmp.exists())

    def test_fetch_error_propagates(self):
        with self.assertRaises(requests.ConnectionError):
            with downloaded(FakeSession(failing=["https://example.test/a.appx"]), "https://example.test/a.appx"):
                self.fail("should not be reached")


if __name__ == "__main__":
    unittest.main()
