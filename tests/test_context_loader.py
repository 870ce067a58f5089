"""Tests for lazy context loading."""

import asyncio
import os
import shutil
import tempfile
import unittest

from search.context_loader import ContextLoader, context_window
from search.models import MatchResult


class TestContextLoader(unittest.TestCase):
    """Test context windows, previews and idempotent loading."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.temp_dir, 'lines.txt')
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write("\n".join(f"line {i}" for i in range(1, 31)))
        self.loader = ContextLoader()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_window_is_centered_on_target(self):
        """Test a window centered on the target line."""
        lines = self.loader.load_lines(self.path, 15, 2)
        self.assertEqual(lines, ['line 13', 'line 14', 'line 15', 'line 16', 'line 17'])

    def test_window_is_clamped_at_file_start(self):
        """Test clamping the window at the start of the file."""
        lines = self.loader.load_lines(self.path, 1, 3)
        self.assertEqual(lines, ['line 1', 'line 2', 'line 3', 'line 4'])

    def test_window_is_clamped_at_file_end(self):
        """Test clamping the window at the end of the file."""
        lines = self.loader.load_lines(self.path, 30, 3)
        self.assertEqual(lines, ['line 27', 'line 28', 'line 29', 'line 30'])

    def test_zero_context_returns_the_line(self):
        """Test that zero context returns only the target line."""
        self.assertEqual(self.loader.load_lines(self.path, 7, 0), ['line 7'])

    def test_missing_file_yields_placeholder(self):
        """Test the placeholder for an unreadable file."""
        missing = os.path.join(self.temp_dir, 'gone.txt')
        lines = self.loader.load_lines(missing, 3, 2)
        self.assertEqual(len(lines), 1)
        self.assertIn(missing, lines[0])

    def test_preview(self):
        """Test the name-mode file preview."""
        preview = self.loader.load_preview(self.path, 2)
        self.assertEqual(preview, [f"line {i}" for i in range(1, 7)])

    def test_async_load_context(self):
        """Test loading context from a coroutine."""
        lines = asyncio.run(self.loader.load_context(self.path, 2, 1))
        self.assertEqual(lines, ['line 1', 'line 2', 'line 3'])

    def test_materialize_is_idempotent(self):
        """Test that context is read once per match."""
        match = MatchResult(file_path=self.path, line=10, column=1, text='line 10')
        self.assertEqual(match.context, ['line 10'])

        first = asyncio.run(self.loader.materialize(match, 1))
        self.assertEqual(first, ['line 9', 'line 10', 'line 11'])
        self.assertTrue(match.context_loaded)

        # A second load must not read the file again
        os.remove(self.path)
        second = asyncio.run(self.loader.materialize(match, 1))
        self.assertEqual(second, first)

    def test_context_window_helper(self):
        """Test the window slicing helper."""
        self.assertEqual(context_window(['a', 'b', 'c'], 2, 5), ['a', 'b', 'c'])
        self.assertEqual(context_window([], 1, 2), [])


if __name__ == '__main__':
    unittest.main()
