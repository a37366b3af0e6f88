import logging
import stat
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from batchwatch.core.common.enums import ArtifactKind, FailureScope

from ..data.classifier import PatternClassifier
from ..domain.interfaces import IArtifactClassifier
from ..domain.models import LogArtifact, ScanFailure, WorkflowRun
from ..domain.status_rules import StatusEvidence, derive_status

module_logger = logging.getLogger(__name__)


class WorkflowInspector:
    """
    Turns one workflow directory into a WorkflowRun.

    Only info.log, error.log and run.log are looked at, in that order.
    Anything else in the directory is ignored.
    """

    def __init__(self,
                 root: Path,
                 classifier: Optional[IArtifactClassifier] = None,
                 logger: Optional[logging.Logger] = None):
        self.root = Path(root)
        self.classifier = classifier or PatternClassifier()
        self.logger = logger or module_logger

    def inspect(self,
                source: str,
                date: str,
                workflow: str,
                failures: Optional[List[ScanFailure]] = None) -> WorkflowRun:
        """
        Never raises for artifact problems:
        - missing file: skipped silently
        - unreadable file: logged, appended to `failures`, skipped
        """
        workflow_path = self.root / source / date / workflow
        artifacts: List[LogArtifact] = []

        for kind in ArtifactKind:
            path = workflow_path / kind.filename
            try:
                artifact = self._read_artifact(source, date, workflow, kind, path)
            except OSError as e:
                self.logger.error(f"Failed to scan log file {path}: {e}")
                if failures is not None:
                    failures.append(ScanFailure(FailureScope.ARTIFACT, str(path), str(e)))
                continue

            if artifact is not None:
                artifacts.append(artifact)

        status = derive_status(StatusEvidence.from_artifacts(artifacts))

        return WorkflowRun(
            source=source,
            date=date,
            workflow=workflow,
            artifacts=tuple(artifacts),
            status=status,
        )

    def _read_artifact(self, source: str, date: str, workflow: str,
                       kind: ArtifactKind, path: Path) -> Optional[LogArtifact]:
        try:
            info = path.stat()
        except FileNotFoundError:
            return None

        if not stat.S_ISREG(info.st_mode):
            self.logger.debug(f"Ignoring non-file artifact path: {path}")
            return None

        try:
            signals_error = self.classifier.classify(path, kind)
        except FileNotFoundError:
            # Removed between stat() and open()
            return None

        return LogArtifact(
            source=source,
            date=date,
            workflow=workflow,
            kind=kind,
            path=path.absolute(),
            size_bytes=info.st_size,
            modified_at=datetime.fromtimestamp(info.st_mtime),
            signals_error=signals_error,
        )
