import logging
from pathlib import Path
from typing import List, Optional, Union

from ..data.content_reader import LocalContentReader
from ..domain.interfaces import IContentReader
from ..domain.models import SearchMatch
from ..domain.requests import SearchRequest
from .scanner import LogScanner

module_logger = logging.getLogger(__name__)

DEFAULT_SEARCH_MAX_LINES = 1000


class LogContentService:
    """
    Content Accessor: file previews and keyword search over a scan's artifacts.
    """

    def __init__(self,
                 scanner: LogScanner,
                 reader: Optional[IContentReader] = None,
                 logger: Optional[logging.Logger] = None,
                 search_max_lines: int = DEFAULT_SEARCH_MAX_LINES):
        self.scanner = scanner
        self.reader = reader or LocalContentReader()
        self.logger = logger or module_logger
        self.search_max_lines = search_max_lines

    def read_lines(self, path: Union[str, Path], max_lines: int = 0) -> List[str]:
        return self.reader.read_lines(Path(path), max_lines)

    def tail_lines(self, path: Union[str, Path], n: int) -> List[str]:
        return self.reader.tail_lines(Path(path), n)

    def search(self, keyword: str, date: Optional[str] = None) -> List[SearchMatch]:
        """
        Case-insensitive search of the first `search_max_lines` lines of every
        artifact found for `date` (today when omitted).
        At most one match per file: its first matching line.
        """
        # Validate before touching the filesystem
        request = SearchRequest(
            keyword=keyword,
            date=self.scanner.today() if date is None else date,
            max_lines=self.search_max_lines,
        )
        needle = request.keyword.lower()

        result = self.scanner.scan(request.date)
        matches: List[SearchMatch] = []

        for run in result.runs:
            for artifact in run.artifacts:
                try:
                    lines = self.reader.read_lines(artifact.path, request.max_lines)
                except OSError as e:
                    self.logger.warning(f"Skipping {artifact.path} during search: {e}")
                    continue

                for line_number, line in enumerate(lines, start=1):
                    if needle in line.lower():
                        matches.append(SearchMatch(artifact=artifact, line_number=line_number, line=line))
                        break

        self.logger.info(f"Search '{request.keyword}' on {request.date}: {len(matches)} matching files")
        return matches
