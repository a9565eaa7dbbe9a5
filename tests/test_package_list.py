import codecs
import tempfile
import unittest
from pathlib import Path

from winget_bootstrap.lib.package_list import (
    decode_package_list,
    iter_package_ids,
    parse_package_list,
    read_package_list,
)


class TestPackageList(unittest.TestCase):
    def test_comments_blanks_and_whitespace(self):
        text = "# comment\n\nMicrosoft.PowerToys\n  Git.Git  \n"
        self.assertEqual(parse_package_list(text), ["Microsoft.PowerToys", "Git.Git"])

    def test_duplicates_are_kept_in_order(self):
        text = "Git.Git\nVim.Vim\nGit.Git\n"
        self.assertEqual(parse_package_list(text), ["Git.Git", "Vim.Vim", "Git.Git"])

    def test_filtering_is_lazy(self):
        seen = []

        def lines():
            for line in ["A.One\n", "# skip\n", "B.Two\n"]:
                seen.append(line)
                yield line

        it = iter_package_ids(lines())
        self.assertEqual(next(it), "A.One")
        self.assertEqual(seen, ["A.One\n"])

    def test_read_from_file_with_bom(self):
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "packages.txt"
            p.write_text("\ufeffGit.Git\r\n# Vim.Vim\r\n\r\n7zip.7zip\r\n", encoding="utf-8")
            self.assertEqual(read_package_list(p), ["Git.Git", "7zip.7zip"])

    def test_utf16_list_written_by_powershell(self):
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "packages.txt"
            p.write_bytes("Git.Git\r\n7zip.7zip\r\n".encode("utf-16"))
            self.assertEqual(read_package_list(p), ["Git.Git", "7zip.7zip"])

    def test_utf16_big_endian(self):
        data = codecs.BOM_UTF16_BE + "Git.Git\n".encode("utf-16-be")
        self.assertEqual(parse_package_list(decode_package_list(data)), ["Git.Git"])

    def test_cp1252_comment_does_not_break_decoding(self):
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "packages.txt"
            p.write_bytes("# caf\u00e9 tools\nGit.Git\n".encode("cp1252"))
            self.assertEqual(read_package_list(p), ["Git.Git"])


if __name__ == "__main__":
    unittest.main()
