"""Lazy loading of the lines surrounding a match."""

import asyncio
import logging
from typing import List

from .line_scanner import read_text_file, split_lines
from .models import MatchResult

logger = logging.getLogger(__name__)

PREVIEW_MULTIPLIER = 3


def context_window(lines: List[str], target_line: int, context_size: int) -> List[str]:
    """
    Slice up to ``2 * context_size + 1`` lines centered on a 1-based line.

    The window is clamped at both ends of the file.
    """
    start = max(0, target_line - context_size - 1)
    end = min(len(lines), target_line + context_size)
    return lines[start:end]


def unavailable_placeholder(file_path: str) -> List[str]:
    return [f"[Context unavailable: {file_path} could not be read]"]


class ContextLoader:
    """Reads surrounding lines for matches, on demand only."""

    def load_lines(self, file_path: str, target_line: int, context_size: int) -> List[str]:
        """
        Read the lines around a target line.

        Args:
            file_path: File holding the match
            target_line: 1-based line number
            context_size: Lines wanted on each side

        Returns:
            The clamped window, or a single placeholder line if the file can
            no longer be read
        """
        content = read_text_file(file_path)
        if content is None:
            return unavailable_placeholder(file_path)
        return context_window(split_lines(content), target_line, max(0, context_size))

    def load_preview(self, file_path: str, context_size: int) -> List[str]:
        """First ``context_size * 3`` lines of a file, for name-mode results."""
        content = read_text_file(file_path)
        if content is None:
            return unavailable_placeholder(file_path)
        return split_lines(content)[:max(0, context_size) * PREVIEW_MULTIPLIER]

    async def load_context(self, file_path: str, target_line: int, context_size: int) -> List[str]:
        """Async form of ``load_lines``."""
        return await asyncio.to_thread(self.load_lines, file_path, target_line, context_size)

    async def load_preview_async(self, file_path: str, context_size: int) -> List[str]:
        """Async form of ``load_preview``."""
        return await asyncio.to_thread(self.load_preview, file_path, context_size)

    async def materialize(self, match: MatchResult, context_size: int) -> List[str]:
        """
        Populate a match's context the first time it is requested.

        Later calls return the stored lines without touching the file.

        Args:
            match: Match whose context should be loaded
            context_size: Lines wanted on each side

        Returns:
            The match's context lines
        """
        if match.context_loaded:
            return list(match.context)

        lines = await self.load_context(match.file_path, match.line, context_size)
        match.context = lines
        match.context_loaded = True
        logger.debug(f"Loaded {len(lines)} context lines for {match.file_path}:{match.line}")
        return list(lines)
