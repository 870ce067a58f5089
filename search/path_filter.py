"""Exclusion rules deciding which filesystem entries a search visits.

Rules come from two places, in order: the default denylist (version control,
dependency and build output directories, log files) and the root's ignore
file. The defaults are compiled into one ``PathSpec`` and matched at any
depth; the ignore file is compiled into a ``GitIgnoreSpec`` with gitignore
semantics (anchoring, directory-only patterns, negation). Defaults are
checked first, so a negation in the ignore file cannot re-include what a
default excludes. Hidden entries are excluded afterwards unless explicitly
allowed.

Only the root ignore file is read; nested ignore files are not merged.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import List, Optional, Iterable

from pathspec import GitIgnoreSpec, PathSpec

logger = logging.getLogger(__name__)

HIDDEN_MARKER = '.'
PATTERN_STYLE = 'gitwildmatch'


def normalize_relative_path(path: str) -> str:
    """Normalize a root-relative path to forward slashes without a leading ``./``."""
    normalized = path.replace('\\', '/')
    if os.sep != '/':
        normalized = normalized.replace(os.sep, '/')
    while normalized.startswith('./'):
        normalized = normalized[2:]
    return normalized.strip('/')


def pattern_compiles(pattern: str) -> bool:
    """Check whether a single gitwildmatch pattern compiles."""
    try:
        PathSpec.from_lines(PATTERN_STYLE, [pattern])
    except (ValueError, re.error) as e:
        logger.debug(f"Treating pattern {pattern!r} as a literal path: {e}")
        return False
    return True


def unanchored(pattern: str) -> str:
    """Rewrite a default denylist pattern so it matches at any depth.

    ``node_modules/**`` becomes ``**/node_modules/**``. Patterns with a
    leading ``/`` stay anchored to the root.
    """
    body = pattern.strip().replace('\\', '/')
    while body.startswith('./'):
        body = body[2:]
    if body.startswith('/') or body.startswith('**/'):
        return body
    return '**/' + body


@dataclass(frozen=True)
class ExclusionRule:
    """A single exclusion pattern and where it came from.

    A literal rule is one whose glob did not compile; it matches the path it
    names and everything beneath it.
    """
    pattern: str
    source: str = 'default'
    literal: bool = False

    def matches_literal(self, relative_path: str) -> bool:
        body = normalize_relative_path(self.pattern.strip())
        if not body:
            return False
        return relative_path == body or relative_path.startswith(body + '/')


def parse_ignore_file(content: str) -> List[str]:
    """
    Extract usable patterns from ignore-file content.

    Blank lines and ``#`` comments are dropped; everything else, negations
    included, is kept for ``GitIgnoreSpec``.

    Args:
        content: Text of a ``.gitignore``-style file

    Returns:
        Patterns in file order
    """
    patterns = []
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith('#'):
            continue
        patterns.append(line)
    return patterns


def _split_rules(patterns: Iterable[str], source: str, to_glob=None):
    """Separate compilable patterns from literal ones, keeping file order."""
    compiled_rules: List[ExclusionRule] = []
    globs: List[str] = []
    literal_rules: List[ExclusionRule] = []
    for pattern in patterns:
        if not pattern or not pattern.strip():
            continue
        glob = to_glob(pattern) if to_glob else pattern.strip()
        if pattern_compiles(glob):
            compiled_rules.append(ExclusionRule(pattern, source=source))
            globs.append(glob)
        else:
            literal_rules.append(ExclusionRule(pattern, source=source, literal=True))
    return compiled_rules, globs, literal_rules


@dataclass
class ExclusionRuleSet:
    """Ordered exclusion rules for one search root."""
    default_rules: List[ExclusionRule] = field(default_factory=list)
    ignore_rules: List[ExclusionRule] = field(default_factory=list)
    literal_rules: List[ExclusionRule] = field(default_factory=list)
    default_spec: Optional[PathSpec] = None
    ignore_spec: Optional[GitIgnoreSpec] = None

    @classmethod
    def from_patterns(cls, defaults: Iterable[str],
                      ignore_patterns: Iterable[str] = ()) -> 'ExclusionRuleSet':
        """Build a rule set with the defaults first and ignore-file rules after them."""
        default_rules, default_globs, default_literals = _split_rules(
            defaults, 'default', to_glob=unanchored
        )
        ignore_rules, ignore_globs, ignore_literals = _split_rules(ignore_patterns, 'ignore-file')

        return cls(
            default_rules=default_rules,
            ignore_rules=ignore_rules,
            literal_rules=default_literals + ignore_literals,
            default_spec=PathSpec.from_lines(PATTERN_STYLE, default_globs) if default_globs else None,
            ignore_spec=GitIgnoreSpec.from_lines(ignore_globs) if ignore_globs else None
        )

    @classmethod
    def load(cls, root_dir: str, defaults: Iterable[str],
             ignore_file_name: str = '.gitignore',
             respect_ignore_file: bool = True) -> 'ExclusionRuleSet':
        """
        Build the rule set for a search root.

        Args:
            root_dir: Directory whose ignore file is read
            defaults: Default denylist patterns
            ignore_file_name: Name of the ignore file inside root_dir
            respect_ignore_file: Whether to read the ignore file at all

        Returns:
            ExclusionRuleSet; a missing or unreadable ignore file contributes no rules
        """
        ignore_patterns: List[str] = []
        if respect_ignore_file:
            ignore_path = os.path.join(root_dir, ignore_file_name)
            try:
                with open(ignore_path, 'r', encoding='utf-8', errors='replace') as f:
                    ignore_patterns = parse_ignore_file(f.read())
                logger.debug(f"Loaded {len(ignore_patterns)} patterns from {ignore_path}")
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"Cannot read ignore file {ignore_path}: {e}")
        return cls.from_patterns(defaults, ignore_patterns)

    def first_match(self, relative_path: str, is_directory: bool = False) -> Optional[ExclusionRule]:
        """
        Return the rule excluding the path, if any.

        Args:
            relative_path: Normalized root-relative path
            is_directory: Whether the path names a directory, so that
                directory-only patterns (``build/``) apply to it

        Returns:
            The deciding rule, or None if no rule excludes the path
        """
        if not relative_path:
            return None
        target = relative_path + '/' if is_directory else relative_path

        if self.default_spec is not None:
            result = self.default_spec.check_file(target)
            if result.include:
                return self.default_rules[result.index]

        if self.ignore_spec is not None:
            result = self.ignore_spec.check_file(target)
            if result.include:
                return self.ignore_rules[result.index]

        for rule in self.literal_rules:
            if rule.matches_literal(relative_path):
                return rule
        return None

    @property
    def patterns(self) -> List[str]:
        rules = self.default_rules + self.ignore_rules + self.literal_rules
        return [rule.pattern for rule in rules]


class PathFilter:
    """Decides whether a root-relative path is visited and reported."""

    def __init__(self, rules: ExclusionRuleSet, include_hidden: bool = False):
        self.rules = rules
        self.include_hidden = include_hidden

    def exclusion_reason(self, relative_path: str, is_directory: bool = False) -> Optional[str]:
        """
        Explain why a path is excluded.

        Args:
            relative_path: Path relative to the search root, any separator style
            is_directory: Whether the path names a directory

        Returns:
            Human-readable reason, or None if the path is included
        """
        path = normalize_relative_path(relative_path)
        if not path:
            return None

        rule = self.rules.first_match(path, is_directory)
        if rule is not None:
            return f"matches {rule.source} pattern {rule.pattern!r}"

        if not self.include_hidden:
            for segment in path.split('/'):
                if segment.startswith(HIDDEN_MARKER):
                    return f"hidden entry {segment!r}"

        return None

    def is_excluded(self, relative_path: str, is_directory: bool = False) -> bool:
        return self.exclusion_reason(relative_path, is_directory) is not None

    def is_included(self, relative_path: str, is_directory: bool = False) -> bool:
        return self.exclusion_reason(relative_path, is_directory) is None
