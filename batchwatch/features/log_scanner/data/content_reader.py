from itertools import islice
from pathlib import Path
from typing import List

from ..domain.interfaces import IContentReader


class LocalContentReader(IContentReader):
    """
    Line readers for log previews and keyword search.
    Lines are returned without their trailing newline.
    """

    def read_lines(self, path: Path, max_lines: int = 0) -> List[str]:
        if max_lines < 0:
            raise ValueError(f"max_lines cannot be negative: {max_lines}")

        with open(path, "r", encoding="utf-8", errors="replace") as f:
            lines = f if max_lines == 0 else islice(f, max_lines)
            return [line.rstrip("\r\n") for line in lines]

    def tail_lines(self, path: Path, n: int) -> List[str]:
        # Reads the whole file, even for very large logs.
        if n <= 0:
            return []
        all_lines = self.read_lines(path, 0)
        return all_lines[-n:]
