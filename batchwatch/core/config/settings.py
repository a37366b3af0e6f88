# File: batchwatch/core/config/settings.py

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

import yaml
from dotenv import load_dotenv

from batchwatch.core.common.enums import RunMode

logger = logging.getLogger(__name__)

# Keys double as environment variable names.
# A YAML file may set the same keys flat (in lower or upper case).
_DEFAULTS: Dict[str, str] = {
    "ENV": "test",

    # --- Log tree ---
    "NFS_ROOT": "",
    "NFS_ROOT_TEST": "./nfs_backup/monitoring",
    "NFS_ROOT_PROD": "/home/informaticaadmin/nfs_backup/monitoring",

    # --- Resource Manager ---
    "YARN_RM_URL": "http://rm-host:8088",
    "YARN_RM_URL_TEST": "./mock/yarn/apps.json",

    # --- Workflow Repository ---
    "INFORMATICA_DB_HOST": "localhost",
    "INFORMATICA_DB_PORT": "1433",
    "INFORMATICA_DB_NAME": "INFORMATICA",
    "INFORMATICA_DB_USER": "repo_read",
    "INFORMATICA_DB_PASS": "password",
    "INFORMATICA_TIME_OFFSET": "3",
    "WORKFLOW_REPO_URL": "",

    # --- Logging ---
    "LOG_LEVEL": "info",
    "LOG_DIR": "./logs",
    "LOG_FILE_ENABLED": "true",

    # --- Scanner ---
    "SCAN_MAX_WORKERS": "1",
    "SEARCH_MAX_LINES": "1000",
}

DEFAULT_ENV_FILE = ".env"

# Searched in the working directory when no file is named
_DEFAULT_CONFIG_FILES: Dict[RunMode, Tuple[str, ...]] = {
    RunMode.PROD: ("prod-config.yaml", "config/prod-config.yaml"),
    RunMode.TEST: ("config.yaml", "config/config.yaml"),
}

_DB_FIELDS = {
    "host": "INFORMATICA_DB_HOST",
    "port": "INFORMATICA_DB_PORT",
    "database": "INFORMATICA_DB_NAME",
    "username": "INFORMATICA_DB_USER",
    "password": "INFORMATICA_DB_PASS",
    "time_offset": "INFORMATICA_TIME_OFFSET",
}

# Sectioned config.yaml layout
_YAML_SCHEMA: Dict[Tuple[str, ...], str] = {
    ("mode",): "ENV",
    ("paths", "nfs_root"): "NFS_ROOT",
    ("paths", "nfs_root_test"): "NFS_ROOT_TEST",
    ("paths", "nfs_root_prod"): "NFS_ROOT_PROD",
    ("paths", "log_dir"): "LOG_DIR",
    ("services", "yarn_rm_url"): "YARN_RM_URL",
    ("services", "yarn_rm_url_test"): "YARN_RM_URL_TEST",
    ("logging", "level"): "LOG_LEVEL",
    ("logging", "file_path"): "LOG_DIR",
    ("logging", "file_log"): "LOG_FILE_ENABLED",
}
for _field, _key in _DB_FIELDS.items():
    _YAML_SCHEMA[("services", "informatica_db", _field)] = _key
    _YAML_SCHEMA[("informatica", _field)] = _key

# Accepted but unused: batchwatch has no web server, history store or JSON log format
_YAML_IGNORED = {("server",), ("database",), ("logging", "json_log")}


def _walk(data: Dict[Any, Any], prefix: Tuple[str, ...] = ()) -> Iterator[Tuple[Tuple[str, ...], Any]]:
    for key, value in data.items():
        key_path = prefix + (str(key).lower(),)
        if isinstance(value, dict):
            yield from _walk(value, key_path)
        else:
            yield key_path, value


def _read_yaml(path: Path) -> Dict[str, str]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    data = yaml.safe_load(path.read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")

    values: Dict[str, str] = {}
    unknown = []
    for key_path, value in _walk(data):
        if value is None:
            continue
        if any(key_path[:i] in _YAML_IGNORED for i in range(1, len(key_path) + 1)):
            logger.debug(f"Ignoring unused config key '{'.'.join(key_path)}' in {path}")
            continue

        if key_path in _YAML_SCHEMA:
            values[_YAML_SCHEMA[key_path]] = str(value)
        elif len(key_path) == 1 and key_path[0].upper() in _DEFAULTS:
            values[key_path[0].upper()] = str(value)
        else:
            unknown.append(".".join(key_path))

    if unknown:
        raise ValueError(f"Unknown keys in config file {path}: {', '.join(sorted(unknown))}")
    return values


def _discover_config(mode: RunMode) -> Optional[Path]:
    for name in _DEFAULT_CONFIG_FILES[mode]:
        candidate = Path(name)
        if candidate.is_file():
            return candidate
    return None


def _to_int(value: str, default: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return int(default)


def _to_bool(value: str) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _to_mode(value: str) -> RunMode:
    value = value.strip().lower()
    if value == "production":
        value = RunMode.PROD.value
    try:
        return RunMode(value)
    except ValueError:
        raise ValueError(f"Unknown mode '{value}'. Expected 'test' or 'prod'.")


class Settings:
    """
    Runtime configuration.

    Priority:
    1. Environment variables (a .env file fills in the ones not already set)
    2. YAML file (config_path, $BATCHWATCH_CONFIG, or config.yaml / prod-config.yaml
       found in the working directory)
    3. Hard-coded defaults

    A config_path ending in .env is loaded into the environment instead of a YAML file.
    """

    def __init__(self, config_path: Optional[str] = None, mode: Optional[str] = None):
        values = dict(_DEFAULTS)

        path = config_path or os.getenv("BATCHWATCH_CONFIG")

        # 1. Dotenv into the process environment; existing variables are kept
        if path and path.lower().endswith(".env"):
            env_file = Path(path)
            if not env_file.is_file():
                raise FileNotFoundError(f"Config file not found: {env_file}")
            load_dotenv(env_file, override=False)
            self.CONFIG_SOURCE: str = f".env file: {env_file}"
        else:
            if Path(DEFAULT_ENV_FILE).is_file():
                load_dotenv(DEFAULT_ENV_FILE, override=False)

            # 2. YAML overlay
            if path:
                yaml_path = Path(path)
            else:
                yaml_path = _discover_config(_to_mode(mode or os.getenv("ENV") or _DEFAULTS["ENV"]))
            if yaml_path:
                values.update(_read_yaml(yaml_path))
                self.CONFIG_SOURCE = f"YAML file: {yaml_path}"
            else:
                logger.info("No config file found, using defaults and environment variables")
                self.CONFIG_SOURCE = "Defaults + Environment Variables"

        for key in _DEFAULTS:
            env_val = os.getenv(key)
            if env_val:
                values[key] = env_val

        if mode:
            values["ENV"] = mode

        # --- Mode ---
        self.MODE: RunMode = _to_mode(values["ENV"])

        # --- Log tree ---
        self.NFS_ROOT: str = values["NFS_ROOT"]
        self.NFS_ROOT_TEST: str = values["NFS_ROOT_TEST"]
        self.NFS_ROOT_PROD: str = values["NFS_ROOT_PROD"]

        # --- Resource Manager ---
        self.YARN_RM_URL: str = values["YARN_RM_URL"]
        self.YARN_RM_URL_TEST: str = values["YARN_RM_URL_TEST"]

        # --- Workflow Repository ---
        self.INFORMATICA_DB_HOST: str = values["INFORMATICA_DB_HOST"]
        self.INFORMATICA_DB_PORT: int = _to_int(values["INFORMATICA_DB_PORT"], _DEFAULTS["INFORMATICA_DB_PORT"])
        self.INFORMATICA_DB_NAME: str = values["INFORMATICA_DB_NAME"]
        self.INFORMATICA_DB_USER: str = values["INFORMATICA_DB_USER"]
        self.INFORMATICA_DB_PASS: str = values["INFORMATICA_DB_PASS"]
        self.INFORMATICA_TIME_OFFSET: int = _to_int(
            values["INFORMATICA_TIME_OFFSET"], _DEFAULTS["INFORMATICA_TIME_OFFSET"]
        )
        self._workflow_repo_url: str = values["WORKFLOW_REPO_URL"]

        # --- Logging ---
        self.LOG_LEVEL: str = values["LOG_LEVEL"].upper()
        self.LOG_DIR: Path = Path(values["LOG_DIR"])
        self.LOG_FILE_ENABLED: bool = _to_bool(values["LOG_FILE_ENABLED"])

        # --- Scanner ---
        self.SCAN_MAX_WORKERS: int = max(1, _to_int(values["SCAN_MAX_WORKERS"], _DEFAULTS["SCAN_MAX_WORKERS"]))
        self.SEARCH_MAX_LINES: int = max(0, _to_int(values["SEARCH_MAX_LINES"], _DEFAULTS["SEARCH_MAX_LINES"]))

    @property
    def is_prod(self) -> bool:
        return self.MODE == RunMode.PROD

    @property
    def is_test(self) -> bool:
        return self.MODE == RunMode.TEST

    @property
    def LOG_ROOT(self) -> Path:
        """An explicit NFS_ROOT wins, otherwise the mode-specific root is used."""
        if self.NFS_ROOT:
            return Path(self.NFS_ROOT)
        if self.is_prod:
            return Path(self.NFS_ROOT_PROD)
        return Path(self.NFS_ROOT_TEST)

    @property
    def YARN_URL(self) -> str:
        return self.YARN_RM_URL if self.is_prod else self.YARN_RM_URL_TEST

    @property
    def WORKFLOW_REPO_URL(self) -> str:
        if self._workflow_repo_url:
            return self._workflow_repo_url

        return (
            f"mssql+pymssql://{self.INFORMATICA_DB_USER}:{self.INFORMATICA_DB_PASS}"
            f"@{self.INFORMATICA_DB_HOST}:{self.INFORMATICA_DB_PORT}/{self.INFORMATICA_DB_NAME}"
        )

    def describe(self) -> Dict[str, Any]:
        """Effective configuration without secrets, for display."""
        return {
            "config_source": self.CONFIG_SOURCE,
            "mode": self.MODE.value,
            "log_root": str(self.LOG_ROOT),
            "yarn_url": self.YARN_URL,
            "workflow_repository": (
                f"{self.INFORMATICA_DB_HOST}:{self.INFORMATICA_DB_PORT}/{self.INFORMATICA_DB_NAME}"
            ),
            "time_offset_hours": self.INFORMATICA_TIME_OFFSET,
            "log_level": self.LOG_LEVEL,
            "log_dir": str(self.LOG_DIR),
            "scan_max_workers": self.SCAN_MAX_WORKERS,
        }


settings = Settings()
