"""Per-query search options."""

from dataclasses import dataclass, replace
from typing import Dict, Any, Optional

# Keys used by the presentation layer mapped onto option fields
_OPTION_ALIASES = {
    'caseSensitive': 'case_sensitive',
    'case_sensitive': 'case_sensitive',
    'wholeWord': 'whole_word',
    'whole_word': 'whole_word',
    'maxResults': 'max_results',
    'max_results': 'max_results',
    'maxFileSize': 'max_file_size',
    'max_file_size': 'max_file_size',
    'contextSize': 'context_size',
    'context_size': 'context_size',
}


@dataclass(frozen=True)
class SearchOptions:
    """Options that may change from one query to the next."""
    case_sensitive: bool = False
    whole_word: bool = False
    max_results: int = 1000
    max_file_size: int = 1024 * 1024
    context_size: int = 10

    def merged(self, overrides: Optional[Dict[str, Any]] = None) -> 'SearchOptions':
        """
        Return a copy with the given overrides applied.

        Args:
            overrides: Option values keyed by snake_case or camelCase names;
                unknown keys and ``None`` values are ignored

        Returns:
            New SearchOptions instance
        """
        if not overrides:
            return self

        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            name = _OPTION_ALIASES.get(key)
            if name is None or value is None:
                continue
            if name == 'max_file_size':
                # Imported lazily: search_settings imports this module
                from .search_settings import parse_file_size
                value = parse_file_size(value)
            elif name == 'max_results':
                value = int(value)
                if value <= 0:
                    raise ValueError(f"max_results must be positive, got {value}")
            elif name == 'context_size':
                value = int(value)
                if value < 0:
                    raise ValueError(f"context_size cannot be negative, got {value}")
            else:
                value = bool(value)
            changes[name] = value

        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'case_sensitive': self.case_sensitive,
            'whole_word': self.whole_word,
            'max_results': self.max_results,
            'max_file_size': self.max_file_size,
            'context_size': self.context_size
        }
