from pathlib import Path
from typing import Tuple

from batchwatch.core.common.enums import ArtifactKind
from ..domain.interfaces import IArtifactClassifier

# Matched case-sensitively.
ERROR_PATTERNS: Tuple[str, ...] = (
    "ERROR",
    "FATAL",
    "Exception",
    "Failed",
    "failure",
    "FAILED",
    "error:",
    "Error:",
)


class PatternClassifier(IArtifactClassifier):
    """
    Heuristic error detection.

    - error.log: any non-whitespace content is the signal.
    - other logs: first line containing one of ERROR_PATTERNS.

    Streams line by line so arbitrarily large logs never sit in memory.
    """

    def __init__(self, patterns: Tuple[str, ...] = ERROR_PATTERNS):
        self.patterns = patterns

    def classify(self, path: Path, kind: ArtifactKind) -> bool:
        # Undecodable bytes are replaced, never raised
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            if kind == ArtifactKind.ERROR:
                return any(line.strip() for line in f)

            for line in f:
                if any(p in line for p in self.patterns):
                    return True

        return False
