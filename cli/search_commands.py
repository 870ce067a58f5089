"""Search CLI commands."""

import asyncio
import json
import logging
import os
import sys
from typing import Optional

import click

from config.config_service import ConfigurationService
from search.fuzzy_ranker import FuzzyRanker
from search.models import SearchMode
from search.search_service import SearchService

logger = logging.getLogger(__name__)


def setup_logging(log_file_path: Optional[str] = None, level: int = logging.WARNING):
    """Set up console logging, plus a log file when one is given."""
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')
    logging.getLogger().setLevel(level)
    if log_file_path:
        handler = logging.FileHandler(log_file_path)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        logging.getLogger().addHandler(handler)


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format."""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f}{unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f}TB"


def _load_service(root: str) -> SearchService:
    try:
        settings = ConfigurationService(root if os.path.isdir(root) else os.path.dirname(root)).get_settings()
    except ValueError as e:
        print(f"✗ {e}")
        sys.exit(1)
    return SearchService(settings=settings)


async def _collect(service: SearchService, root: str, query: str, mode: SearchMode, options: dict):
    """Run one query and page through every result."""
    snapshot = await service.search(root, query, mode, options)
    while snapshot.has_more:
        snapshot = service.load_more(snapshot.session_id)
    return snapshot


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Log debug output to stderr')
@click.option('--log-file', type=click.Path(dir_okay=False), help='Also write logs to this file')
def quickfind(verbose: bool, log_file: Optional[str]):
    """Search file contents and file names, live."""
    setup_logging(log_file, logging.DEBUG if verbose else logging.WARNING)


@quickfind.command()
@click.argument('pattern')
@click.argument('root', default='.', type=click.Path(exists=True))
@click.option('--case-sensitive', '-s', is_flag=True, help='Match case exactly')
@click.option('--whole-word', '-w', is_flag=True, help='Only match whole words')
@click.option('--max-results', '-m', type=click.IntRange(min=1), help='Stop after this many matches')
@click.option('--context', '-C', 'context_size', type=click.IntRange(min=0), default=0,
              help='Print this many lines around each match')
def text(pattern: str, root: str, case_sensitive: bool, whole_word: bool,
         max_results: Optional[int], context_size: int):
    """Search file contents under ROOT for PATTERN (a regular expression)."""
    root = os.path.abspath(root)
    service = _load_service(root)
    options = {
        'case_sensitive': case_sensitive or None,
        'whole_word': whole_word or None,
        'max_results': max_results,
        'context_size': context_size
    }

    async def run():
        snapshot = await _collect(service, root, pattern, SearchMode.TEXT, options)
        base = root if os.path.isdir(root) else os.path.dirname(root)
        for match in snapshot.items:
            location = os.path.relpath(match.file_path, base)
            print(f"{location}:{match.line}:{match.column}: {match.text}")
            if context_size > 0:
                lines = await service.load_context(snapshot.session_id, match.match_id, context_size)
                first = max(1, match.line - context_size)
                for offset, line in enumerate(lines):
                    marker = '>' if first + offset == match.line else ' '
                    print(f"  {marker} {first + offset:>5} | {line}")
        return snapshot

    snapshot = asyncio.run(run())
    if not snapshot.items:
        print("No matches found")
        return
    print(f"\n{snapshot.count_label} match(es) in {snapshot.elapsed_ms}ms")


@quickfind.command()
@click.argument('query', default='')
@click.argument('root', default='.', type=click.Path(exists=True, file_okay=False))
@click.option('--limit', '-n', type=int, default=20, help='Number of files to show')
@click.option('--no-highlight', is_flag=True, help='Do not mark matched characters')
def files(query: str, root: str, limit: int, no_highlight: bool):
    """Rank file names under ROOT against a fuzzy QUERY."""
    root = os.path.abspath(root)
    service = _load_service(root)

    snapshot = asyncio.run(_collect(service, root, query, SearchMode.NAME, {}))
    if not snapshot.items:
        print("No files found")
        return

    for scored in snapshot.items[:limit]:
        candidate = scored.candidate
        name = candidate.name
        if not no_highlight:
            name = FuzzyRanker.highlight(name, scored.name_indices)
        print(f"{scored.score:>6}  {name:<40} {candidate.relative_path} ({format_size(candidate.size)})")

    shown = min(limit, len(snapshot.items))
    print(f"\nShowing {shown} of {snapshot.count_label} file(s)")


@quickfind.command()
@click.argument('root', default='.', type=click.Path(exists=True, file_okay=False))
def config(root: str):
    """Print the effective settings for ROOT as JSON."""
    try:
        settings = ConfigurationService(os.path.abspath(root)).get_settings()
    except ValueError as e:
        print(f"✗ {e}")
        sys.exit(1)
    print(json.dumps(settings.to_dict(), indent=2))


@quickfind.command()
def server():
    """Run the MCP server over stdio."""
    from server import main_sync
    main_sync()


def main():
    """Main entry point for the CLI."""
    quickfind()


if __name__ == '__main__':
    main()
