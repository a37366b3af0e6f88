# File: tests/conftest.py

import logging
import os
import sys
from pathlib import Path
from typing import Dict, Optional

import pytest

# 1. Add project root to path
sys.path.append(os.getcwd())

# Every variable Settings reads, so the host environment never leaks into a test
CONFIG_ENV_VARS = (
    "BATCHWATCH_CONFIG",
    "ENV",
    "NFS_ROOT",
    "NFS_ROOT_TEST",
    "NFS_ROOT_PROD",
    "YARN_RM_URL",
    "YARN_RM_URL_TEST",
    "INFORMATICA_DB_HOST",
    "INFORMATICA_DB_PORT",
    "INFORMATICA_DB_NAME",
    "INFORMATICA_DB_USER",
    "INFORMATICA_DB_PASS",
    "INFORMATICA_TIME_OFFSET",
    "WORKFLOW_REPO_URL",
    "LOG_LEVEL",
    "LOG_DIR",
    "LOG_FILE_ENABLED",
    "SCAN_MAX_WORKERS",
    "SEARCH_MAX_LINES",
)


class LogTreeBuilder:
    """
    Builds <root>/<source>/<date>/<workflow>/ directories with log files.
    """

    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def add(self, source: str, date: str, workflow: str,
            files: Optional[Dict[str, str]] = None) -> Path:
        workflow_dir = self.root / source / date / workflow
        workflow_dir.mkdir(parents=True, exist_ok=True)
        for name, content in (files or {}).items():
            (workflow_dir / name).write_text(content)
        return workflow_dir


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path_factory):
    """
    Runs before EVERY test.
    Clears configuration variables, disables the dated log file and
    moves into an empty working directory so no .env or config.yaml is found.
    """
    saved = dict(os.environ)
    for key in CONFIG_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("LOG_FILE_ENABLED", "false")

    workdir = tmp_path_factory.mktemp("cwd")
    monkeypatch.chdir(workdir)
    yield

    # load_dotenv writes os.environ directly
    os.environ.clear()
    os.environ.update(saved)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """configure_logging replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)


@pytest.fixture
def log_tree(tmp_path):
    return LogTreeBuilder(tmp_path / "monitoring")
