import os
from pathlib import Path
from typing import List

from ..domain.errors import LogRootUnavailableError
from ..domain.interfaces import ILogTreeWalker


def _list_subdirectories(path: Path) -> List[str]:
    """Names of directories directly under path, ordinal-sorted. Files are ignored."""
    with os.scandir(path) as entries:
        return sorted(e.name for e in entries if e.is_dir())


class LocalLogTreeWalker(ILogTreeWalker):
    """
    Walks <root>/<source>/<YYYY-MM-DD>/<workflow>/ on the local (or NFS-mounted) filesystem.
    """

    def list_sources(self, root: Path) -> List[str]:
        try:
            return _list_subdirectories(root)
        except OSError as e:
            raise LogRootUnavailableError(f"Cannot list log root {root}: {e}") from e

    def list_workflows(self, root: Path, source: str, date: str) -> List[str]:
        date_path = Path(root) / source / date

        # No activity for that source on that date
        if not date_path.exists():
            return []

        # Unreadable date/source directory propagates as OSError
        return _list_subdirectories(date_path)
