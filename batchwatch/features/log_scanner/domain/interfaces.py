from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from batchwatch.core.common.enums import ArtifactKind


class IArtifactClassifier(ABC):
    """
    Contract for deciding whether one log file signals an error,
    independent of the rest of the tree.
    """
    @abstractmethod
    def classify(self, path: Path, kind: ArtifactKind) -> bool:
        """
        Returns True if the file signals an error.
        Raises OSError if the file cannot be read.
        """
        pass


class ILogTreeWalker(ABC):
    """
    Contract for enumerating the root/source/date/workflow hierarchy.
    Only directories count; stray files at any level are ignored.
    """
    @abstractmethod
    def list_sources(self, root: Path) -> List[str]:
        """Sorted source names. Raises LogRootUnavailableError if root cannot be listed."""
        pass

    @abstractmethod
    def list_workflows(self, root: Path, source: str, date: str) -> List[str]:
        """Sorted workflow names. A missing date directory yields an empty list."""
        pass


class IContentReader(ABC):
    """
    Contract for line-oriented access to log content.
    """
    @abstractmethod
    def read_lines(self, path: Path, max_lines: int = 0) -> List[str]:
        """First max_lines lines in file order (0 = whole file)."""
        pass

    @abstractmethod
    def tail_lines(self, path: Path, n: int) -> List[str]:
        """Last n lines, or all lines if the file is shorter."""
        pass
