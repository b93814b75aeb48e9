"""
Tests for divvy/logging_config.py.

Verifies run ids, the JSON Lines file log, structured phase summaries,
and that reset_logging() leaves no handlers behind.
"""

import json
import logging
import os

from divvy.logging_config import (
    ConsoleFormatter,
    JsonFormatter,
    RunIdFilter,
    StepTimer,
    get_run_logger,
    log_step_summary,
    reset_logging,
    set_run_id,
    setup_logging,
)


def _record(msg="hello", **extra):
    record = logging.LogRecord("divvy.test", logging.INFO, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestRunId:

    def test_generated_once_and_kept(self):
        """A record without a preset id gets a fresh one, reused afterwards."""
        f = RunIdFilter()
        first, second = _record(), _record()
        f.filter(first)
        f.filter(second)
        assert len(first.run_id) == 8
        assert second.run_id == first.run_id

    def test_set_explicit(self):
        assert set_run_id("abc123") == "abc123"
        record = _record()
        RunIdFilter().filter(record)
        assert record.run_id == "abc123"


class TestFormatters:

    def test_json_fields(self):
        entry = json.loads(JsonFormatter().format(_record(run_id="r1")))
        assert entry["message"] == "hello"
        assert entry["level"] == "INFO"
        assert entry["run_id"] == "r1"

    def test_json_includes_step_extras(self):
        entry = json.loads(JsonFormatter().format(
            _record(step_name="indexing", timing_seconds=1.5,
                    output_summary={"viable_seeds": 3})))
        assert entry["step_name"] == "indexing"
        assert entry["output_summary"] == {"viable_seeds": 3}

    def test_console_format(self):
        line = ConsoleFormatter().format(_record())
        assert "[INFO] hello" in line


class TestSetupLogging:

    def test_no_file_log_by_default(self, tmp_path, monkeypatch):
        monkeypatch.delenv("DIVVY_LOG_DIR", raising=False)
        monkeypatch.chdir(tmp_path)
        get_run_logger("divvy.test")
        assert os.listdir(tmp_path) == []
        assert len(logging.getLogger("divvy").handlers) == 1

    def test_run_dir_writes_jsonl(self, tmp_path):
        setup_logging(run_dir=str(tmp_path))
        set_run_id("run42")
        log = get_run_logger("divvy.test")
        log_step_summary(log, "draw", input_summary={"iterations": 2},
                         output_summary={"subsamples": 2}, timing_seconds=0.1)
        for handler in logging.getLogger("divvy").handlers:
            handler.flush()

        path = tmp_path / "subsampling.jsonl"
        lines = [json.loads(l) for l in path.read_text().splitlines()]
        assert lines[-1]["step_name"] == "draw"
        assert lines[-1]["run_id"] == "run42"
        assert lines[-1]["input_summary"] == {"iterations": 2}

    def test_env_log_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DIVVY_LOG_DIR", str(tmp_path / "logs"))
        get_run_logger("divvy.test").info("x")
        assert (tmp_path / "logs" / "subsampling.jsonl").exists()

    def test_idempotent(self):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger("divvy").handlers) == 1

    def test_reset_removes_handlers(self, tmp_path):
        setup_logging(run_dir=str(tmp_path))
        reset_logging()
        assert logging.getLogger("divvy").handlers == []


class TestStepSummary:

    def test_message_and_extras(self, caplog):
        log = logging.getLogger("divvy.test")
        with caplog.at_level(logging.INFO, logger="divvy"):
            log_step_summary(log, "indexing", output_summary={"viable_seeds": 4},
                             timing_seconds=2.25)
        record = caplog.records[-1]
        assert record.getMessage() == "[indexing] success (2.2s) output={'viable_seeds': 4}"
        assert record.step_name == "indexing"
        assert record.timing_seconds == 2.25


class TestStepTimer:

    def test_elapsed_non_negative(self):
        with StepTimer() as t:
            sum(range(1000))
        assert t.elapsed >= 0
