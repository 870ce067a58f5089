"""Search settings model and defaults."""

import logging
import re
from dataclasses import dataclass, field, asdict, fields
from typing import List, Dict, Any, Optional

from .search_options import SearchOptions

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 1024 * 1024  # 1 MiB

# Version control, dependency and build output directories, plus log files
DEFAULT_EXCLUDE_PATTERNS = [
    '.git/**',
    '.svn/**',
    '.hg/**',
    'node_modules/**',
    '__pycache__/**',
    'venv/**',
    '.venv/**',
    'target/**',
    'dist/**',
    'build/**',
    'out/**',
    'coverage/**',
    '.nyc_output/**',
    '.pytest_cache/**',
    '.vscode-test/**',
    '*.log'
]

DEFAULT_TEXT_EXTENSIONS = [
    '.js', '.ts', '.jsx', '.tsx', '.html', '.css', '.scss', '.json', '.md', '.txt',
    '.py', '.java', '.cpp', '.c', '.h', '.go', '.rs', '.php', '.rb', '.swift', '.kt',
    '.yaml', '.yml', '.toml', '.ini', '.conf', '.config', '.env', '.xml', '.svg'
]

_SIZE_UNITS = {
    'B': 1,
    'KB': 1024,
    'MB': 1024 * 1024,
    'GB': 1024 * 1024 * 1024,
}

_SIZE_PATTERN = re.compile(r'^(\d+(?:\.\d+)?)\s*(B|KB|MB|GB)?$')


def parse_file_size(value: Any) -> int:
    """
    Parse a file size such as ``'1MB'``, ``'500 kb'`` or ``2048`` into bytes.

    Args:
        value: Size string with an optional B/KB/MB/GB unit, or a number

    Returns:
        Size in bytes; the 1 MiB default when the value cannot be parsed
    """
    if isinstance(value, bool):
        logger.warning(f"Invalid file size format: {value!r}, using default 1MB")
        return DEFAULT_MAX_FILE_SIZE
    if isinstance(value, (int, float)):
        return int(value)

    match = _SIZE_PATTERN.match(str(value).strip().upper())
    if not match:
        logger.warning(f"Invalid file size format: {value!r}, using default 1MB")
        return DEFAULT_MAX_FILE_SIZE

    number = float(match.group(1))
    unit = match.group(2) or 'B'
    return int(number * _SIZE_UNITS[unit])


@dataclass
class SearchSettings:
    """Effective configuration for one search session."""
    max_results: int = 1000
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    case_sensitive: bool = False
    whole_word: bool = False
    context_size: int = 10
    max_depth: int = 8
    include_hidden: bool = False
    follow_symlinks: bool = False
    include_directories: bool = False
    respect_ignore_file: bool = True
    ignore_file_name: str = '.gitignore'
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    per_file_match_limit: int = 100
    scan_batch_size: int = 10
    initial_batch_size: int = 50
    load_more_batch_size: int = 25
    text_extensions: Optional[List[str]] = None

    def to_options(self) -> SearchOptions:
        """Per-query options seeded from these settings."""
        return SearchOptions(
            case_sensitive=self.case_sensitive,
            whole_word=self.whole_word,
            max_results=self.max_results,
            max_file_size=self.max_file_size,
            context_size=self.context_size
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SearchSettings':
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        if 'max_file_size' in values:
            values['max_file_size'] = parse_file_size(values['max_file_size'])
        if values.get('exclude_patterns') is not None:
            values['exclude_patterns'] = list(values['exclude_patterns'])
        if values.get('text_extensions') is not None:
            values['text_extensions'] = [ext.lower() for ext in values['text_extensions']]
        return cls(**values)
