import csv
import json

from orrery.core.logging_utils import RunLogger


def test_creates_run_directory(tmp_path):
    logger = RunLogger(tmp_path, run_id="alpha")
    logger.close()
    assert logger.run_dir == tmp_path / "alpha"
    assert (tmp_path / "last_run.txt").read_text(encoding="utf-8") == "alpha"
    header = (logger.run_dir / "timeseries.csv").read_text(encoding="utf-8").splitlines()[0]
    assert header.split(",") == RunLogger.TIMESERIES_HEADER


def test_existing_run_id_gets_suffix(tmp_path):
    first = RunLogger(tmp_path, run_id="alpha")
    second = RunLogger(tmp_path, run_id="alpha")
    first.close()
    second.close()
    assert second.run_id == "alpha_1"
    assert (tmp_path / "last_run.txt").read_text(encoding="utf-8") == "alpha_1"


def test_timeseries_formatting(tmp_path):
    with RunLogger(tmp_path, run_id="ts") as logger:
        logger.log_ts([3, 0.1234567890123, "locked_orbit", True, False])
    rows = (tmp_path / "ts" / "timeseries.csv").read_text(encoding="utf-8").splitlines()
    assert rows[1] == "3,0.123456789,locked_orbit,1,0"


def test_buffered_until_threshold(tmp_path):
    logger = RunLogger(tmp_path, run_id="buf", timeseries_flush_threshold=3)
    path = tmp_path / "buf" / "timeseries.csv"
    logger.log_ts([1])
    logger.log_ts([2])
    assert len(path.read_text(encoding="utf-8").splitlines()) == 1
    logger.log_ts([3])
    assert len(path.read_text(encoding="utf-8").splitlines()) == 4
    logger.close()


def test_event_details_survive_csv(tmp_path):
    with RunLogger(tmp_path, run_id="ev") as logger:
        logger.log_event(12.5, "mode_change", {"command": "toggle_lock", "mode": "locked_orbit"})
        logger.log_event(13.0, "tick")
    with (tmp_path / "ev" / "events.csv").open(newline="") as fh:
        rows = list(csv.DictReader(fh))
    assert rows[0]["type"] == "mode_change"
    assert float(rows[0]["t"]) == 12.5
    assert json.loads(rows[0]["details"]) == {"command": "toggle_lock", "mode": "locked_orbit"}
    assert json.loads(rows[1]["details"]) == {}


def test_close_is_idempotent(tmp_path):
    logger = RunLogger(tmp_path, run_id="twice")
    logger.close()
    logger.close()


def test_meta_handles_non_json_values(tmp_path):
    from datetime import datetime, timezone

    with RunLogger(tmp_path, run_id="meta") as logger:
        logger.write_meta({"epoch": datetime(2000, 1, 1, tzinfo=timezone.utc), "scale": 2.0})
    meta = json.loads((tmp_path / "meta" / "meta.json").read_text(encoding="utf-8"))
    assert meta["scale"] == 2.0
    assert meta["epoch"].startswith("2000-01-01")


def test_headers_on_disk_before_first_flush(tmp_path):
    """A run that stops before any flush still leaves readable CSVs."""
    logger = RunLogger(tmp_path, run_id="early")
    logger.log_ts([1, 2.0])
    logger.log_event(0.0, "tick")
    ts = (tmp_path / "early" / "timeseries.csv").read_text(encoding="utf-8")
    events = (tmp_path / "early" / "events.csv").read_text(encoding="utf-8")
    assert ts == ",".join(RunLogger.TIMESERIES_HEADER) + "\n"
    assert events == ",".join(RunLogger.EVENTS_HEADER) + "\n"
    logger.close()
