# File: batchwatch/cli.py

import argparse
import json
import logging
import sys
from datetime import timedelta
from typing import List, Optional

import yaml

from batchwatch.core.config.settings import Settings
from batchwatch.core.logging_setup import configure_logging
from batchwatch.features.log_scanner.domain.errors import LogRootUnavailableError
from batchwatch.features.log_scanner.domain.models import ScanResult, WorkflowRun
from batchwatch.features.log_scanner.service import api as logs_api
from batchwatch.features.log_scanner.service.scanner import LogScanner
from batchwatch.features.resource_manager.domain.errors import ResourceManagerError
from batchwatch.features.resource_manager.domain.formatting import format_duration, format_memory
from batchwatch.features.resource_manager.domain.models import Application
from batchwatch.features.resource_manager.service import api as yarn_api
from batchwatch.features.workflow_repository.domain.errors import (
    WorkflowNotFoundError,
    WorkflowRepositoryError,
)
from batchwatch.features.workflow_repository.service import api as wf_api

__version__ = "1.0.0"

logger = logging.getLogger("batchwatch.cli")

# Reported as "Error: ..." with exit code 1. Anything else is a bug and propagates.
HANDLED_ERRORS = (
    LogRootUnavailableError,
    ResourceManagerError,
    WorkflowRepositoryError,
    WorkflowNotFoundError,
    OSError,
    ValueError,
)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


# --- config ---

def cmd_config(args, config: Settings) -> int:
    for key, value in config.describe().items():
        print(f"{key:<20} {value}")
    return 0


# --- logs ---

def _print_run(run: WorkflowRun) -> None:
    marker = " (errors)" if run.has_error else ""
    print(f"[{run.source}] {run.workflow}  {run.status.value}{marker}")
    for artifact in run.artifacts:
        flag = "  !" if artifact.signals_error else ""
        print(
            f"    {artifact.kind.filename:<10} {artifact.size_bytes:>10} B  "
            f"{artifact.modified_at:%Y-%m-%d %H:%M:%S}  {artifact.path}{flag}"
        )


def _print_scan(result: ScanResult, as_json: bool) -> None:
    if as_json:
        _print_json(result.to_dict())
        return

    print(f"Date: {result.date}  Workflows: {len(result)}")
    for run in result:
        _print_run(run)

    if result.failures:
        print(f"Skipped {len(result.failures)} units:")
        for failure in result.failures:
            print(f"    {failure.scope.value:<9} {failure.unit}: {failure.reason}")


def cmd_logs_scan(args, config: Settings) -> int:
    scanner = logs_api.build_scanner(config)
    result = scanner.scan(args.date) if args.date is not None else scanner.scan_today()

    if args.source or args.status:
        result = LogScanner.filter_runs(result, source=args.source, status=args.status)

    _print_scan(result, args.json)
    return 0


def cmd_logs_search(args, config: Settings) -> int:
    matches = logs_api.build_content_service(config).search(args.keyword, args.date)

    if args.json:
        _print_json([m.to_dict() for m in matches])
        return 0

    for match in matches:
        a = match.artifact
        print(f"{a.source}/{a.workflow}/{a.kind.filename}:{match.line_number}: {match.line}")
    print(f"{len(matches)} matching files")
    return 0


def cmd_logs_show(args, config: Settings) -> int:
    for line in logs_api.build_content_service(config).read_lines(args.path, args.max_lines):
        print(line)
    return 0


def cmd_logs_tail(args, config: Settings) -> int:
    for line in logs_api.build_content_service(config).tail_lines(args.path, args.lines):
        print(line)
    return 0


# --- yarn ---

def _print_apps(apps: List[Application], as_json: bool) -> None:
    if as_json:
        _print_json([a.to_dict() for a in apps])
        return

    for app in apps:
        print(
            f"{app.id:<32} {app.name[:40]:<40} {app.user:<12} {app.queue:<10} "
            f"{app.progress:5.1f}%  {format_duration(app.elapsed_time):>8}  "
            f"{format_memory(app.allocated_mb):>9}"
        )
    print(f"{len(apps)} applications")


def cmd_yarn_list(args, config: Settings) -> int:
    service = yarn_api.build_service(config)
    _print_apps(service.applications_by_state(args.state), args.json)
    return 0


def cmd_yarn_kill(args, config: Settings) -> int:
    killed = yarn_api.build_service(config).kill_by_pattern(args.pattern)
    for app_id in killed:
        print(f"Killed {app_id}")
    print(f"{len(killed)} applications killed")
    return 0


def cmd_yarn_stale(args, config: Settings) -> int:
    service = yarn_api.build_service(config)
    _print_apps(service.stale_applications(timedelta(hours=args.hours)), args.json)
    return 0


def cmd_yarn_metrics(args, config: Settings) -> int:
    metrics = yarn_api.build_service(config).cluster_metrics()

    if args.json:
        _print_json(metrics.to_dict())
        return 0

    print(f"Apps running     {metrics.apps_running} (pending {metrics.apps_pending}, failed {metrics.apps_failed})")
    print(f"Memory           {format_memory(metrics.allocated_mb)} / {format_memory(metrics.total_mb)} "
          f"({metrics.memory_utilization:.1f}%)")
    print(f"VCores           {metrics.allocated_vcores} / {metrics.total_vcores}")
    print(f"Nodes            {metrics.active_nodes} active, {metrics.unhealthy_nodes} unhealthy, "
          f"{metrics.lost_nodes} lost")
    return 0


# --- wf ---

def _tree_from_repository(platform: Optional[str], config: Settings, as_json: bool) -> None:
    tree = wf_api.build_service(config).platform_tree(platform)

    if as_json:
        _print_json([node.to_dict() for node in tree])
        return

    for node in tree:
        wf = node.workflow
        print(f"{wf.workflow_name}  {wf.status}  {wf.started_at}  elapsed {wf.elapsed}")
        for task in node.tasks:
            print(f"    {task.task_name:<40} {task.status:<10} {task.node_name:<16} elapsed {task.elapsed}")
    print(f"{len(tree)} workflows")


def _tree_from_logs(platform: Optional[str], config: Settings, as_json: bool) -> None:
    result = logs_api.build_scanner(config).scan_today()
    needle = (platform or "").lower()
    runs = tuple(r for r in result if needle in r.source.lower())

    _print_scan(ScanResult(date=result.date, runs=runs, failures=result.failures), as_json)


def cmd_wf_tree(args, config: Settings) -> int:
    # The repository is only reachable from production hosts
    if config.is_prod:
        _tree_from_repository(args.platform, config, args.json)
    else:
        logger.info("Not in prod mode, building workflow tree from the log tree")
        _tree_from_logs(args.platform, config, args.json)
    return 0


# --- parser ---

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="batchwatch", description="Batch platform monitoring")
    parser.add_argument("--config", help="YAML configuration file, or a .env file")
    parser.add_argument("--mode", choices=["test", "prod"], help="Override the configured run mode")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    commands = parser.add_subparsers(dest="command")

    config_cmd = commands.add_parser("config", help="Show the effective configuration")
    config_cmd.set_defaults(handler=cmd_config)

    # logs
    logs = commands.add_parser("logs", help="Inspect the workflow log tree").add_subparsers(dest="logs_command")

    for name, help_text in (("today", "Scan today's logs"), ("scan", "Scan one date")):
        scan = logs.add_parser(name, help=help_text)
        if name == "scan":
            scan.add_argument("--date", required=True, help="YYYY-MM-DD")
        else:
            scan.set_defaults(date=None)
        scan.add_argument("--source", help="Only this source")
        scan.add_argument("--status", help="Only this status (Failed, Completed, In Progress, No Logs)")
        scan.add_argument("--json", action="store_true")
        scan.set_defaults(handler=cmd_logs_scan)

    search = logs.add_parser("search", help="Find the first line containing a keyword in each log")
    search.add_argument("keyword")
    search.add_argument("--date", help="YYYY-MM-DD, defaults to today")
    search.add_argument("--json", action="store_true")
    search.set_defaults(handler=cmd_logs_search)

    show = logs.add_parser("show", help="Print a log file")
    show.add_argument("path")
    show.add_argument("--max-lines", type=int, default=0, help="0 means the whole file")
    show.set_defaults(handler=cmd_logs_show)

    tail = logs.add_parser("tail", help="Print the last lines of a log file")
    tail.add_argument("path")
    tail.add_argument("-n", dest="lines", type=int, default=50)
    tail.set_defaults(handler=cmd_logs_tail)

    # yarn
    yarn = commands.add_parser("yarn", help="Resource manager applications").add_subparsers(dest="yarn_command")

    yarn_list = yarn.add_parser("list", help="List applications")
    yarn_list.add_argument("--state", default="RUNNING", help="Comma separated states")
    yarn_list.add_argument("--json", action="store_true")
    yarn_list.set_defaults(handler=cmd_yarn_list)

    yarn_kill = yarn.add_parser("kill", help="Kill running applications whose name matches a regex")
    yarn_kill.add_argument("--pattern", required=True)
    yarn_kill.set_defaults(handler=cmd_yarn_kill)

    yarn_stale = yarn.add_parser("stale", help="Running applications older than --hours")
    yarn_stale.add_argument("--hours", type=float, default=4.0)
    yarn_stale.add_argument("--json", action="store_true")
    yarn_stale.set_defaults(handler=cmd_yarn_stale)

    yarn_metrics = yarn.add_parser("metrics", help="Cluster metrics")
    yarn_metrics.add_argument("--json", action="store_true")
    yarn_metrics.set_defaults(handler=cmd_yarn_metrics)

    # wf
    wf = commands.add_parser("wf", help="Workflow executions").add_subparsers(dest="wf_command")

    tree = wf.add_parser("tree", help="Today's workflows for a platform")
    tree.add_argument("--platform", help="Case-insensitive name fragment")
    tree.add_argument("--json", action="store_true")
    tree.set_defaults(handler=cmd_wf_tree)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help(sys.stderr)
        return 2

    try:
        config = Settings(config_path=args.config, mode=args.mode)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    configure_logging(
        "DEBUG" if args.debug else config.LOG_LEVEL,
        log_dir=config.LOG_DIR,
        file_log=config.LOG_FILE_ENABLED,
        stream=sys.stderr,
    )

    try:
        return handler(args, config)
    except HANDLED_ERRORS as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
