import pytest

from batchwatch.core.common.enums import ArtifactKind
from batchwatch.features.log_scanner.data.classifier import ERROR_PATTERNS, PatternClassifier


@pytest.fixture
def classifier():
    return PatternClassifier()


def test_error_log_with_content_signals_error(tmp_path, classifier):
    path = tmp_path / "error.log"
    path.write_text("\n\n   something went wrong\n")

    assert classifier.classify(path, ArtifactKind.ERROR) is True


@pytest.mark.parametrize("content", ["", "\n", "   \n\t\n  "])
def test_blank_error_log_is_clean(tmp_path, classifier, content):
    path = tmp_path / "error.log"
    path.write_text(content)

    assert classifier.classify(path, ArtifactKind.ERROR) is False


@pytest.mark.parametrize("pattern", ERROR_PATTERNS)
def test_every_pattern_flags_info_log(tmp_path, classifier, pattern):
    path = tmp_path / "info.log"
    path.write_text(f"step 1 ok\nstep 2 {pattern} while loading\nstep 3 ok\n")

    assert classifier.classify(path, ArtifactKind.GENERAL) is True


def test_clean_summary_log(tmp_path, classifier):
    path = tmp_path / "run.log"
    path.write_text("Workflow started\nWorkflow succeeded\n")

    assert classifier.classify(path, ArtifactKind.SUMMARY) is False


def test_patterns_are_case_sensitive(tmp_path, classifier):
    """'fatal' and 'exception' in lower case are not error markers."""
    path = tmp_path / "info.log"
    path.write_text("non-fatal warning\nno exception raised\n")

    assert classifier.classify(path, ArtifactKind.GENERAL) is False


def test_undecodable_bytes_do_not_raise(tmp_path, classifier):
    path = tmp_path / "info.log"
    path.write_bytes(b"\xff\xfe garbage \x80\nFATAL: disk full\n")

    assert classifier.classify(path, ArtifactKind.GENERAL) is True


def test_custom_patterns(tmp_path):
    path = tmp_path / "info.log"
    path.write_text("WARN low memory\n")

    assert PatternClassifier(patterns=("WARN",)).classify(path, ArtifactKind.GENERAL) is True
    assert PatternClassifier().classify(path, ArtifactKind.GENERAL) is False


def test_missing_file_propagates(tmp_path, classifier):
    with pytest.raises(FileNotFoundError):
        classifier.classify(tmp_path / "nope.log", ArtifactKind.GENERAL)
