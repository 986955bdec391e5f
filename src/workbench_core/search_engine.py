"""Parallel text and regex search across a project tree."""

import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .config import settings
from .models.search import FileMatch, Match, SearchOptions, SearchResults
from .path_utils import is_binary, relativize
from .pattern_compiler import compile_matcher
from .tree_walker import TreeWalker

logger = logging.getLogger(__name__)


class SearchEngine:
    """
    Project search engine.

    Compiles the search term, enumerates candidate files and scans them on a
    pool of worker threads. Each worker only reads the shared matcher and
    root, and returns its own per-file result, so no locking is needed while
    scanning. Results are concatenated in candidate order.
    """

    def __init__(self, tree_walker: TreeWalker | None = None, max_workers: int | None = None):
        """
        Initialize the search engine.

        Args:
            tree_walker: Walker used to enumerate candidate files
            max_workers: Worker threads for scanning (defaults to settings)
        """
        self.tree_walker = tree_walker or TreeWalker()
        self.max_workers = max_workers if max_workers is not None else settings.search_max_workers

    def search(self, project_path: str, search_term: str, options: SearchOptions) -> SearchResults:
        """
        Search every candidate file of a project for a term.

        Args:
            project_path: Project root directory
            search_term: Literal text or regex
            options: Matching and filtering options

        Returns:
            SearchResults with per-file matches and counters

        Raises:
            InvalidSearchPatternError: If the term cannot be compiled
            ProjectRootError: If the project root cannot be traversed
        """
        start_time = time.time()

        matcher = compile_matcher(search_term, options)

        root = Path(project_path)
        candidates = self.tree_walker.walk(
            root,
            include_ignored=options.include_ignored,
            exclude_patterns=options.exclude_patterns,
        )

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            file_results = executor.map(
                lambda path: self._scan_file(path, root, matcher), candidates
            )
            matches = [file_match for file_match in file_results if file_match is not None]

        total_matches = sum(len(file_match.matches) for file_match in matches)
        search_time_ms = (time.time() - start_time) * 1000

        logger.info(
            f"Search for {search_term!r} in {project_path}: files={len(candidates)}, "
            f"files_with_matches={len(matches)}, matches={total_matches}, "
            f"time={search_time_ms:.1f}ms"
        )

        return SearchResults(
            matches=matches,
            files_searched=len(candidates),
            total_matches=total_matches,
            search_time_ms=search_time_ms,
        )

    def _scan_file(self, path: Path, root: Path, matcher: re.Pattern[str]) -> FileMatch | None:
        """Collect every match in one file, or None if it has none or cannot be read."""
        if is_binary(path):
            return None

        try:
            # No newline translation: only \n ends a line
            content = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Skipping unreadable file {path}: {e}")
            return None

        file_matches = [
            Match(line_number=line_number, line_content=line, match_index=found.start())
            for line_number, line in enumerate(split_lines(content), start=1)
            for found in matcher.finditer(line)
        ]
        if not file_matches:
            return None

        return FileMatch(file_path=relativize(path, root), matches=file_matches)


def split_lines(content: str) -> list[str]:
    """
    Split text into lines on ``\\n``, dropping a trailing ``\\r`` from each.

    A final newline does not produce an extra empty line.
    """
    if not content:
        return []
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]
