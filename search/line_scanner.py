"""Line-oriented pattern matching over file content."""

import asyncio
import logging
import os
import re
from dataclasses import dataclass, field
from typing import List, Optional

from .models import MatchResult

logger = logging.getLogger(__name__)

PER_FILE_MATCH_LIMIT = 100
BINARY_SNIFF_BYTES = 8192


@dataclass(frozen=True)
class ScanOptions:
    """Options controlling how a pattern is interpreted."""
    case_sensitive: bool = False
    whole_word: bool = False


@dataclass(frozen=True)
class CompiledPattern:
    """A pattern compiled once per query and shared by every file scan."""
    pattern: str
    regex: re.Pattern
    literal: bool = False


@dataclass
class FileScan:
    """Outcome of scanning one file."""
    file_path: str
    matches: List[MatchResult] = field(default_factory=list)
    capped: bool = False
    skipped: Optional[str] = None


def read_text_file(file_path: str, max_file_size: Optional[int] = None) -> Optional[str]:
    """
    Read a file as UTF-8 text.

    Args:
        file_path: File to read
        max_file_size: Byte ceiling; larger files are skipped, not truncated

    Returns:
        Decoded content, or None for oversized, unreadable, binary or
        undecodable files
    """
    try:
        size = os.path.getsize(file_path)
        if max_file_size is not None and size > max_file_size:
            logger.info(f"File {file_path} is too large ({size} bytes), skipping")
            return None
        with open(file_path, 'rb') as f:
            data = f.read() if max_file_size is None else f.read(max_file_size + 1)
    except OSError as e:
        logger.warning(f"Cannot read {file_path}: {e}")
        return None

    if max_file_size is not None and len(data) > max_file_size:
        logger.info(f"File {file_path} grew past {max_file_size} bytes while reading, skipping")
        return None

    if b'\x00' in data[:BINARY_SNIFF_BYTES]:
        logger.debug(f"Skipping binary file {file_path}")
        return None

    try:
        return data.decode('utf-8-sig')
    except UnicodeDecodeError:
        logger.debug(f"Skipping undecodable file {file_path}")
        return None


def split_lines(content: str) -> List[str]:
    """Split on ``\\n``, dropping a trailing ``\\r`` from each line."""
    return [line[:-1] if line.endswith('\r') else line for line in content.split('\n')]


class LineScanner:
    """Finds every occurrence of a regular expression, line by line.

    A pattern that fails to compile is searched for literally instead, with
    the same case and whole-word rules. Scanning a file stops once the
    per-file match limit is reached.
    """

    def __init__(self, per_file_limit: int = PER_FILE_MATCH_LIMIT):
        self.per_file_limit = per_file_limit

    def compile(self, pattern: str, options: Optional[ScanOptions] = None) -> CompiledPattern:
        """
        Compile a pattern for repeated use.

        Args:
            pattern: Regular expression, or literal text if it is not a valid one
            options: Case sensitivity and whole-word settings

        Returns:
            CompiledPattern; ``literal`` is True when the fallback was used
        """
        options = options or ScanOptions()
        flags = 0 if options.case_sensitive else re.IGNORECASE

        try:
            # Validate the bare pattern so that wrapping cannot repair it
            re.compile(pattern, flags)
            source = rf'\b(?:{pattern})\b' if options.whole_word else pattern
            return CompiledPattern(pattern=pattern, regex=re.compile(source, flags))
        except re.error as e:
            logger.warning(f'Invalid regex pattern "{pattern}", falling back to literal search: {e}')

        source = re.escape(pattern)
        if options.whole_word:
            source = rf'(?<!\w){source}(?!\w)'
        return CompiledPattern(pattern=pattern, regex=re.compile(source, flags), literal=True)

    def scan(self, content: str, pattern: str, options: Optional[ScanOptions] = None,
             file_path: str = '') -> List[MatchResult]:
        """
        Scan text content for a pattern.

        Args:
            content: Text to search
            pattern: Regular expression (or literal text)
            options: Case sensitivity and whole-word settings
            file_path: Path recorded on each match

        Returns:
            Matches in ascending line and column order
        """
        compiled = self.compile(pattern, options)
        return self.scan_content(content, compiled, file_path).matches

    def scan_content(self, content: str, compiled: CompiledPattern, file_path: str = '') -> FileScan:
        """Scan text with an already compiled pattern."""
        result = FileScan(file_path=file_path)
        regex = compiled.regex
        limit = self.per_file_limit
        full = False

        for line_index, line in enumerate(split_lines(content)):
            position = 0
            while position <= len(line):
                match = regex.search(line, position)
                if match is None:
                    break
                if full:
                    # One match past the limit proves the file was cut short
                    result.capped = True
                    return result

                result.matches.append(MatchResult(
                    file_path=file_path,
                    line=line_index + 1,
                    column=match.start() + 1,
                    text=line.strip()
                ))
                if len(result.matches) >= limit:
                    full = True

                # Zero-width matches must still move the cursor forward
                position = match.end() if match.end() > match.start() else match.end() + 1

        return result

    def scan_path(self, file_path: str, compiled: CompiledPattern,
                  max_file_size: Optional[int] = None) -> FileScan:
        """Read and scan one file. Blocking; see ``scan_file`` for the async form."""
        content = read_text_file(file_path, max_file_size)
        if content is None:
            return FileScan(file_path=file_path, skipped='unreadable')
        return self.scan_content(content, compiled, file_path)

    async def scan_file(self, file_path: str, compiled: CompiledPattern,
                        max_file_size: Optional[int] = None) -> FileScan:
        """Read and scan one file in a worker thread."""
        return await asyncio.to_thread(self.scan_path, file_path, compiled, max_file_size)
