import pytest

from batchwatch.features.log_scanner.data.tree_walker import LocalLogTreeWalker
from batchwatch.features.log_scanner.domain.errors import LogRootUnavailableError


@pytest.fixture
def walker():
    return LocalLogTreeWalker()


def test_sources_are_sorted_directories_only(log_tree, walker):
    log_tree.add("zeta", "2025-01-10", "wf")
    log_tree.add("Alpha", "2025-01-10", "wf")
    log_tree.add("beta", "2025-01-10", "wf")
    (log_tree.root / "README.txt").write_text("not a source")

    # Ordinal sort: upper case before lower case
    assert walker.list_sources(log_tree.root) == ["Alpha", "beta", "zeta"]


def test_missing_root_raises(tmp_path, walker):
    with pytest.raises(LogRootUnavailableError):
        walker.list_sources(tmp_path / "missing")


def test_root_that_is_a_file_raises(tmp_path, walker):
    not_a_dir = tmp_path / "root.txt"
    not_a_dir.write_text("x")

    with pytest.raises(LogRootUnavailableError):
        walker.list_sources(not_a_dir)


def test_workflows_for_date(log_tree, walker):
    log_tree.add("batchA", "2025-01-10", "job2")
    log_tree.add("batchA", "2025-01-10", "job1")
    log_tree.add("batchA", "2025-01-11", "job3")
    (log_tree.root / "batchA" / "2025-01-10" / "stray.log").write_text("ignored")

    assert walker.list_workflows(log_tree.root, "batchA", "2025-01-10") == ["job1", "job2"]


def test_no_date_directory_means_no_workflows(log_tree, walker):
    log_tree.add("batchA", "2025-01-10", "job1")

    assert walker.list_workflows(log_tree.root, "batchA", "2025-02-01") == []


def test_date_path_that_is_a_file_propagates(log_tree, walker):
    (log_tree.root / "batchA").mkdir()
    (log_tree.root / "batchA" / "2025-01-10").write_text("not a directory")

    with pytest.raises(OSError):
        walker.list_workflows(log_tree.root, "batchA", "2025-01-10")
