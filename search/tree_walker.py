"""Recursive file discovery under a search root."""

import asyncio
import logging
import os
import stat
from typing import List, Optional, Set, Tuple

from .models import Candidate, SearchRoot, SearchScope
from .path_filter import PathFilter, normalize_relative_path

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 8


def candidate_sort_key(candidate: Candidate) -> Tuple[str, str]:
    """Display name, case-insensitive; relative path breaks ties."""
    return (candidate.name.casefold(), candidate.relative_path)


class TreeWalker:
    """
    Enumerates files under a root, applying a PathFilter.

    Each directory listing runs in a worker thread, so the walk suspends once
    per directory and never blocks the event loop. Unreadable directories and
    entries that cannot be stat'ed are logged and skipped; a missing or
    unreadable root yields an empty list.
    """

    def __init__(
        self,
        path_filter: PathFilter,
        max_depth: int = DEFAULT_MAX_DEPTH,
        follow_symlinks: bool = False,
        include_directories: bool = False
    ):
        """
        Initialize the walker.

        Args:
            path_filter: Filter applied to every root-relative path
            max_depth: Deepest directory level listed; the root is level 0
            follow_symlinks: Whether to descend into symlinked directories
            include_directories: Whether directories are reported as candidates
        """
        self.path_filter = path_filter
        self.max_depth = max_depth
        self.follow_symlinks = follow_symlinks
        self.include_directories = include_directories

    async def walk(self, root: SearchRoot) -> List[Candidate]:
        """
        Discover candidates under a search root.

        Args:
            root: Search root; a single-file root yields just that file

        Returns:
            Candidates sorted by display name, case-insensitive
        """
        if root.scope == SearchScope.SINGLE_FILE:
            candidate = await asyncio.to_thread(self._stat_single_file, root)
            return [candidate] if candidate else []

        if not await asyncio.to_thread(os.path.isdir, root.path):
            logger.info(f"Search root {root.path} is not a directory, nothing to walk")
            return []

        candidates: List[Candidate] = []
        visited: Set[Tuple[int, int]] = set()
        await self._walk_directory(root.path, root.path, candidates, visited, 0)
        candidates.sort(key=candidate_sort_key)
        logger.debug(f"Discovered {len(candidates)} candidates under {root.path}")
        return candidates

    async def _walk_directory(
        self,
        current_path: str,
        base_path: str,
        candidates: List[Candidate],
        visited: Set[Tuple[int, int]],
        depth: int
    ) -> None:
        if depth > self.max_depth:
            return

        listing = await asyncio.to_thread(self._list_directory, current_path, base_path, visited)
        if listing is None:
            return

        for candidate in listing:
            if candidate.is_directory:
                if self.include_directories:
                    candidates.append(candidate)
                await self._walk_directory(candidate.path, base_path, candidates, visited, depth + 1)
            else:
                candidates.append(candidate)

    def _list_directory(
        self,
        current_path: str,
        base_path: str,
        visited: Set[Tuple[int, int]]
    ) -> Optional[List[Candidate]]:
        """List, filter and stat one directory. Runs in a worker thread."""
        try:
            with os.scandir(current_path) as iterator:
                entries = sorted(iterator, key=lambda e: e.name)
            dir_stat = os.stat(current_path)
            visited.add((dir_stat.st_dev, dir_stat.st_ino))
        except OSError as e:
            # Skip directories we can't read (permissions, etc.)
            logger.warning(f"Cannot read directory {current_path}: {e}")
            return None

        listing: List[Candidate] = []
        for entry in entries:
            relative_path = normalize_relative_path(os.path.relpath(entry.path, base_path))
            try:
                is_directory = entry.is_dir()
            except OSError as e:
                logger.warning(f"Cannot stat {entry.path}: {e}")
                continue
            if self.path_filter.is_excluded(relative_path, is_directory):
                continue

            try:
                is_symlink = entry.is_symlink()
                entry_stat = entry.stat(follow_symlinks=True)
            except OSError as e:
                # Broken symlinks, permission changes, files vanishing mid-walk
                logger.warning(f"Cannot stat {entry.path}: {e}")
                continue

            if stat.S_ISDIR(entry_stat.st_mode):
                if is_symlink:
                    if not self.follow_symlinks:
                        continue
                    key = (entry_stat.st_dev, entry_stat.st_ino)
                    if key in visited:
                        logger.debug(f"Skipping symlink loop at {entry.path}")
                        continue
                listing.append(Candidate(
                    path=entry.path,
                    name=entry.name,
                    relative_path=relative_path,
                    size=0,
                    modified=entry_stat.st_mtime,
                    is_directory=True
                ))
            elif stat.S_ISREG(entry_stat.st_mode):
                listing.append(Candidate(
                    path=entry.path,
                    name=entry.name,
                    relative_path=relative_path,
                    size=entry_stat.st_size,
                    modified=entry_stat.st_mtime
                ))

        return listing

    def _stat_single_file(self, root: SearchRoot) -> Optional[Candidate]:
        try:
            file_stat = os.stat(root.path)
        except OSError as e:
            logger.warning(f"Cannot stat {root.path}: {e}")
            return None
        name = os.path.basename(root.path)
        return Candidate(
            path=root.path,
            name=name,
            relative_path=name,
            size=file_stat.st_size,
            modified=file_stat.st_mtime
        )
