"""
Doc extraction behavioral tests.

Scope
- Classification of the leading comment block (summary, usage with
  continuation lines, options block, completion marker, description).
- Reading stops at the first non-comment line.
- Invalid UTF-8 inside the comment block raises InvalidUTF8Error.
- Optional READMEs yield empty docs when absent.

Conventions
- Test method names follow CamelCase per project convention.
- Files are written into a fresh temporary directory per test.
"""
import os
import tempfile
import unittest
from pathlib import Path
from unittest import TestCase

from sub.docs import Docs, extract_comment_block, extract_docs, parse_docs, read_docs
from sub.faults import InvalidUTF8Error, SubCommandIoError

GREET = [
    "#!/bin/sh",
    "# Summary: Greets someone",
    "# Usage: {cmd} <name>",
    "#   [--loud]!",
    "#",
    "# Options:",
    "#   name: who to greet",
    "#   loud: shout",
    "#",
    "# Greets the given person.",
    "#",
    "# Twice if asked.",
]


class TestParseDocs(TestCase):
    """Line classification of an already extracted comment block."""

    def testFullBlock(self):
        docs = parse_docs(GREET)
        self.assertEqual(docs.summary, "Greets someone")
        self.assertEqual(docs.usage, "# Usage: {cmd} <name> [--loud]!")
        self.assertEqual(docs.options, ("name: who to greet", "loud: shout"))
        self.assertEqual(docs.description, "Greets the given person.\n\nTwice if asked.")
        self.assertFalse(docs.provides_completions)

    def testEmptyBlock(self):
        self.assertEqual(parse_docs([]), Docs())

    def testShebangIsIgnored(self):
        self.assertEqual(parse_docs(["#!/usr/bin/env bash"]), Docs())

    def testSummaryOnly(self):
        docs = parse_docs(["# Summary:   Greets  "])
        self.assertEqual(docs.summary, "Greets")
        self.assertIsNone(docs.usage)
        self.assertIsNone(docs.description)

    def testUsageWithoutContinuation(self):
        docs = parse_docs(["# Usage: {cmd} <name>", "# Says hello."])
        self.assertEqual(docs.usage, "# Usage: {cmd} <name>")
        self.assertEqual(docs.description, "Says hello.")

    def testCompletionMarker(self):
        docs = parse_docs(["# Summary: Old style", "# Provide completions"])
        self.assertTrue(docs.provides_completions)
        self.assertIsNone(docs.description)

    def testOptionsBlockEndsAtUnindentedLine(self):
        docs = parse_docs(["# Options:", "#   count(script): retries", "# More text."])
        self.assertEqual(docs.options, ("count(script): retries",))
        self.assertEqual(docs.description, "More text.")

    def testTrailingEmptyDescriptionLinesAreTrimmed(self):
        docs = parse_docs(["# First.", "#", "#"])
        self.assertEqual(docs.description, "First.")


class TestExtractDocs(TestCase):
    """Reading the comment block from files."""

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.root = Path(self.directory.name)

    def tearDown(self):
        self.directory.cleanup()

    def write(self, name, content):
        path = self.root / name
        path.write_bytes(content if isinstance(content, bytes) else content.encode("utf-8"))
        return path

    def testReadingStopsAtFirstCodeLine(self):
        path = self.write("greet", "\n".join(GREET[:2]) + "\necho hi\n# Summary: not this one\n")
        self.assertEqual(extract_comment_block(path), GREET[:2])
        self.assertEqual(extract_docs(path).summary, "Greets someone")

    def testCarriageReturnsAreStripped(self):
        path = self.write("greet", "# Summary: Greets\r\n# Usage: {cmd}\r\n")
        self.assertEqual(extract_comment_block(path), ["# Summary: Greets", "# Usage: {cmd}"])

    def testBinaryBodyIsNeverDecoded(self):
        path = self.write("tool", b"# Summary: Tool\n\x7fELF\xff\xfe\n")
        self.assertEqual(extract_docs(path).summary, "Tool")

    def testInvalidUTF8InCommentBlock(self):
        path = self.write("broken", b"# Summary: ok\n# Usage: \xff\n")
        with self.assertRaises(InvalidUTF8Error) as context:
            extract_docs(path)
        self.assertEqual(context.exception.line, 2)
        self.assertEqual(context.exception.path, path)

    def testMissingFileRaises(self):
        with self.assertRaises(FileNotFoundError):
            extract_docs(self.root / "missing")

    @unittest.skipIf(os.geteuid() == 0, "root reads any file")
    def testUnreadableFileRaisesFault(self):
        path = self.write("secret", "# Summary: Secret\n")
        path.chmod(0o111)
        with self.assertRaises(SubCommandIoError) as context:
            extract_docs(path)
        self.assertEqual(context.exception.path, path)
        self.assertIsInstance(context.exception.cause, PermissionError)

    def testDirectoryRaisesFault(self):
        with self.assertRaises(SubCommandIoError):
            extract_comment_block(self.root)

    def testMissingReadmeYieldsEmptyDocs(self):
        self.assertEqual(read_docs(self.root / "README"), Docs())

    def testReadme(self):
        path = self.write("README", "# Summary: Administration commands\n# Restart or inspect services.\n")
        docs = read_docs(path)
        self.assertEqual(docs.summary, "Administration commands")
        self.assertEqual(docs.description, "Restart or inspect services.")


if __name__ == "__main__":
    unittest.main()
