import json
from datetime import date, datetime, timedelta, timezone

import pytest

from batchwatch.cli import main
from batchwatch.core.database.base import Base
from batchwatch.core.database.connection import build_engine, build_session_factory
from batchwatch.features.workflow_repository.data.sql_models import TaskStatModel, WorkflowStatModel
from batchwatch.features.workflow_repository.domain.timeutil import local_now

DATE = "2025-01-10"

RM_FIXTURE = {
    "apps": {
        "app": [
            {"id": "application_1_0001", "name": "ingest_orders", "user": "etl", "queue": "default",
             "state": "RUNNING", "progress": 50.0, "elapsedTime": 90_000, "allocatedMB": 2048},
            {"id": "application_1_0002", "name": "report_daily", "user": "bi", "queue": "reports",
             "state": "FINISHED"},
        ]
    },
    "clusterMetrics": {"appsRunning": 1, "allocatedMB": 2048, "totalMB": 8192, "activeNodes": 2},
}


@pytest.fixture
def env(log_tree, tmp_path, monkeypatch):
    """Test-mode configuration pointing at a populated log tree and an RM fixture file."""
    log_tree.add("batchA", DATE, "job1", {"info.log": "Starting\nDone\n", "run.log": "ok\n"})
    log_tree.add("batchA", DATE, "job2", {"info.log": "Starting\nStep FAILED\n"})
    log_tree.add("batchB", DATE, "jobX", {"info.log": "Running\n"})

    rm_file = tmp_path / "apps.json"
    rm_file.write_text(json.dumps(RM_FIXTURE))

    monkeypatch.setenv("NFS_ROOT", str(log_tree.root))
    monkeypatch.setenv("YARN_RM_URL_TEST", str(rm_file))
    return log_tree


# --- Usage ---

def test_no_command_is_usage_error(capsys):
    assert main([]) == 2


def test_unknown_command_exits_2():
    with pytest.raises(SystemExit) as exc:
        main(["explode"])
    assert exc.value.code == 2


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])

    assert exc.value.code == 0
    assert "batchwatch 1.0.0" in capsys.readouterr().out


def test_missing_config_file(tmp_path, capsys):
    assert main(["--config", str(tmp_path / "missing.yaml"), "config"]) == 1
    assert "Config file not found" in capsys.readouterr().err


def test_config_from_dotenv_file(tmp_path, capsys):
    env_file = tmp_path / "batchwatch.env"
    env_file.write_text("NFS_ROOT=/srv/from-dotenv\n")

    assert main(["--config", str(env_file), "config"]) == 0
    assert "/srv/from-dotenv" in capsys.readouterr().out


def test_unknown_config_key_is_reported(tmp_path, capsys):
    path = tmp_path / "config.yaml"
    path.write_text("paths:\n  nfs_rot: /srv\n")

    assert main(["--config", str(path), "config"]) == 1
    assert "paths.nfs_rot" in capsys.readouterr().err


def test_config_command(env, capsys):
    assert main(["config"]) == 0

    out = capsys.readouterr().out
    assert "mode" in out
    assert str(env.root) in out


# --- logs ---

def test_logs_scan_json(env, capsys):
    assert main(["logs", "scan", "--date", DATE, "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert [(w["workflow"], w["status"]) for w in data["workflows"]] == [
        ("job1", "Completed"),
        ("job2", "Failed"),
        ("jobX", "In Progress"),
    ]


def test_logs_scan_filtered_text(env, capsys):
    assert main(["logs", "scan", "--date", DATE, "--status", "failed"]) == 0

    out = capsys.readouterr().out
    assert "[batchA] job2  Failed (errors)" in out
    assert "job1" not in out


def test_logs_scan_source_filter(env, capsys):
    assert main(["logs", "scan", "--date", DATE, "--source", "batchB", "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert [w["workflow"] for w in data["workflows"]] == ["jobX"]


def test_logs_scan_bad_date(env, capsys):
    assert main(["logs", "scan", "--date", "10/01/2025"]) == 1
    assert "Invalid date" in capsys.readouterr().err


def test_logs_scan_unreachable_root(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("NFS_ROOT", str(tmp_path / "not-mounted"))

    assert main(["logs", "scan", "--date", DATE]) == 1
    assert "Cannot list log root" in capsys.readouterr().err


def test_logs_today(env, capsys):
    env.add("batchC", date.today().isoformat(), "today_job", {"run.log": "done"})

    assert main(["logs", "today", "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert [w["workflow"] for w in data["workflows"]] == ["today_job"]


def test_logs_search(env, capsys):
    assert main(["logs", "search", "starting", "--date", DATE]) == 0

    out = capsys.readouterr().out
    assert "batchA/job1/info.log:1: Starting" in out
    assert "2 matching files" in out


def test_logs_search_empty_keyword(env, capsys):
    assert main(["logs", "search", "  ", "--date", DATE]) == 1


def test_logs_show_and_tail(env, capsys):
    path = env.root / "batchA" / DATE / "job2" / "info.log"

    assert main(["logs", "show", str(path), "--max-lines", "1"]) == 0
    assert capsys.readouterr().out == "Starting\n"

    assert main(["logs", "tail", str(path), "-n", "1"]) == 0
    assert capsys.readouterr().out == "Step FAILED\n"


def test_logs_show_missing_file(env, tmp_path, capsys):
    assert main(["logs", "show", str(tmp_path / "nope.log")]) == 1


# --- yarn ---

def test_yarn_list_json(env, capsys):
    assert main(["yarn", "list", "--json"]) == 0

    apps = json.loads(capsys.readouterr().out)
    assert [a["id"] for a in apps] == ["application_1_0001"]


def test_yarn_list_text(env, capsys):
    assert main(["yarn", "list", "--state", "RUNNING,FINISHED"]) == 0

    out = capsys.readouterr().out
    assert "ingest_orders" in out
    assert "1.5m" in out
    assert "2.0 GB" in out
    assert "2 applications" in out


def test_yarn_kill_is_refused_in_test_mode(env, capsys):
    assert main(["yarn", "kill", "--pattern", "ingest"]) == 0

    captured = capsys.readouterr()
    assert "0 applications killed" in captured.out
    assert "read-only" in captured.err


def test_yarn_kill_bad_pattern(env, capsys):
    assert main(["yarn", "kill", "--pattern", "("]) == 1


def test_yarn_metrics(env, capsys):
    assert main(["yarn", "metrics"]) == 0

    out = capsys.readouterr().out
    assert "Apps running     1" in out
    assert "(25.0%)" in out


def test_yarn_unreachable_fixture(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("YARN_RM_URL_TEST", str(tmp_path / "missing.json"))

    assert main(["yarn", "list"]) == 1


# --- wf ---

def test_wf_tree_falls_back_to_log_tree(env, capsys):
    today = date.today().isoformat()
    env.add("EDW_platform", today, "wf_load", {"info.log": "ok", "run.log": "done"})
    env.add("CRM_platform", today, "wf_sync", {"info.log": "ok"})

    assert main(["wf", "tree", "--platform", "edw", "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert [(w["source"], w["workflow"]) for w in data["workflows"]] == [("EDW_platform", "wf_load")]


def test_wf_tree_from_repository_in_prod(tmp_path, monkeypatch, capsys):
    engine = build_engine(f"sqlite:///{tmp_path / 'repo.db'}")
    Base.metadata.create_all(bind=engine)

    # One second after the start of the repository-local day
    day_start = datetime.combine(local_now(3).date(), datetime.min.time())
    start_ms = int((day_start - timedelta(hours=3)).replace(tzinfo=timezone.utc).timestamp()) * 1000 + 1000

    with build_session_factory(engine)() as db:
        db.add_all([
            WorkflowStatModel(stat_id=1, workflow_name="wf_EDW_load", state=1, start_time=start_ms,
                              end_time=start_ms + 60_000),
            WorkflowStatModel(stat_id=2, workflow_name="wf_CRM_sync", state=0, start_time=start_ms),
            TaskStatModel(parent_stat_id=1, task_name="s_m_load", service_name="DIS", node_name="node01",
                          state=2, start_time=start_ms, end_time=start_ms + 30_000),
        ])
        db.commit()
    engine.dispose()

    monkeypatch.setenv("WORKFLOW_REPO_URL", f"sqlite:///{tmp_path / 'repo.db'}")
    monkeypatch.setenv("INFORMATICA_TIME_OFFSET", "3")

    assert main(["--mode", "prod", "wf", "tree", "--platform", "EDW", "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert len(data) == 1
    assert data[0]["workflow"]["workflow_name"] == "wf_EDW_load"
    assert data[0]["workflow"]["elapsed"] == {"hrs": 0, "min": 1, "sec": 0}
    assert [t["task_name"] for t in data[0]["tasks"]] == ["s_m_load"]
