#!/usr/bin/env python3
from unittest import TestCase, main
import io
import os
import shutil
import tempfile
from contextlib import redirect_stdout
from unittest import mock
from ziparchive import cli
from ziparchive.reader import OverwriteDecision


class CliTestCase(TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp(prefix="_ziparchive_cli_")
        self.src = os.path.join(self.tmpdir, "src")
        os.makedirs(os.path.join(self.src, "sub"))
        with open(os.path.join(self.src, "a.txt"), "wb") as f:
            f.write(b"foo baz bar")
        with open(os.path.join(self.src, "sub", "b.txt"), "wb") as f:
            f.write(b"baz trololo something" * 50)
        self.archive = os.path.join(self.tmpdir, "out.zip")
        self.cwd = os.getcwd()
        os.chdir(self.tmpdir)

    def tearDown(self):
        os.chdir(self.cwd)
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_add_and_extract(self):
        self.assertEqual(cli.main(["a", "out.zip", "src", "-m9", "--threads", "2"]), 0)
        self.assertEqual(cli.main(["l", "out.zip"]), 0)
        self.assertEqual(cli.main(["t", "out.zip"]), 0)
        self.assertEqual(cli.main(["x", "out.zip", "-C", "unpacked", "--force"]), 0)
        with open(os.path.join("unpacked", "src", "sub", "b.txt"), "rb") as f:
            self.assertEqual(f.read(), b"baz trololo something" * 50)
        # second run overwrites without asking
        self.assertEqual(cli.main(["x", "out.zip", "-C", "unpacked", "--force"]), 0)

    def test_skipped_files_not_counted(self):
        self.assertEqual(cli.main(["a", "out.zip", "src"]), 0)
        self.assertEqual(cli.main(["x", "out.zip", "-C", "unpacked"]), 0)
        out = io.StringIO()
        with mock.patch("ziparchive.reader.prompt_overwrite",
                        return_value=OverwriteDecision.NO) as prompt, \
                redirect_stdout(out):
            self.assertEqual(cli.main(["x", "out.zip", "-C", "unpacked"]), 0)
        self.assertEqual(prompt.call_count, 2)
        self.assertIn("Done. 0 files extracted.", out.getvalue())

    def test_bad_arguments(self):
        self.assertEqual(cli.main([]), cli.EXIT_INVALID_ARGUMENTS)
        self.assertEqual(cli.main(["q", "out.zip"]), cli.EXIT_INVALID_ARGUMENTS)
        self.assertEqual(cli.main(["a", "out.zip", "src", "-m12"]),
                         cli.EXIT_INVALID_ARGUMENTS)
        self.assertEqual(cli.main(["a", "out.zip", "src", "--threads", "0"]),
                         cli.EXIT_INVALID_ARGUMENTS)

    def test_missing_input(self):
        self.assertEqual(cli.main(["a", "out.zip", "nope.txt"]), cli.EXIT_FILE_ERROR)
        self.assertEqual(cli.main(["x", "nope.zip"]), cli.EXIT_FILE_ERROR)

    def test_corrupted_archive(self):
        self.assertEqual(cli.main(["a", "out.zip", "src/a.txt", "-m0"]), 0)
        with open("out.zip", "r+b") as f:
            f.seek(30 + len("src/a.txt") + 3)
            f.write(b"X")
        self.assertEqual(cli.main(["t", "out.zip"]), cli.EXIT_DECOMPRESSION_ERROR)

    def test_progress(self):
        out = io.StringIO()
        cli.show_progress("Compressing", 2, 4, out)
        self.assertIn("50.0% (2/4)", out.getvalue())
        cli.show_progress("Compressing", 4, 4, out)
        self.assertTrue(out.getvalue().endswith("(4/4)\n"))


if __name__ == '__main__':
    main()
