"""Analyze a recorded orrery run and generate diagnostic figures."""
from __future__ import annotations

import argparse
import csv
import json
from pathlib import Path
from typing import Dict, List

import numpy as np

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt


TIMESERIES_FILENAME = "timeseries.csv"
EVENTS_FILENAME = "events.csv"
META_FILENAME = "meta.json"
FIGS_SUBDIR = "figs"
TEXT_COLUMNS = ("mode",)


def load_timeseries(path: Path) -> Dict[str, np.ndarray]:
    with path.open("r", newline="") as fh:
        reader = csv.DictReader(fh)
        columns: Dict[str, list] = {name: [] for name in reader.fieldnames or []}
        for row in reader:
            for key, value in row.items():
                if key is None:
                    continue
                columns.setdefault(key, []).append(value if key in TEXT_COLUMNS else float(value))
    return {key: np.asarray(values) for key, values in columns.items()}


def load_events(path: Path) -> List[dict]:
    with path.open("r", newline="") as fh:
        reader = csv.DictReader(fh)
        events: List[dict] = []
        for row in reader:
            if not row or not row.get("type"):
                continue
            event = {"t": float(row["t"]), "type": row["type"], "details": {}}
            details_raw = row.get("details", "")
            if details_raw:
                try:
                    event["details"] = json.loads(details_raw)
                except json.JSONDecodeError:
                    event["details"] = details_raw
            events.append(event)
    return events


def ensure_fig_dir(run_dir: Path) -> Path:
    fig_dir = run_dir / FIGS_SUBDIR
    fig_dir.mkdir(parents=True, exist_ok=True)
    return fig_dir


def summarize_events(events: List[dict]) -> Dict[str, int]:
    summary: Dict[str, int] = {}
    for event in events:
        summary[event["type"]] = summary.get(event["type"], 0) + 1
    return summary


def estimate_period(ts: Dict[str, np.ndarray]) -> float | None:
    """Period from successive ascending crossings of the Moon through world x = 0."""

    clock = ts.get("clock")
    x = ts.get("moon_x")
    z = ts.get("moon_z")
    if clock is None or x is None or z is None or clock.size < 3:
        return None
    order = np.argsort(clock)
    clock, x, z = clock[order], x[order], z[order]
    crossings = []
    for i in range(1, clock.size):
        if x[i - 1] < 0.0 <= x[i] and z[i] > 0.0:
            frac = -x[i - 1] / (x[i] - x[i - 1])
            crossings.append(clock[i - 1] + frac * (clock[i] - clock[i - 1]))
    if len(crossings) >= 2:
        return crossings[-1] - crossings[-2]
    return None


def theoretical_period(meta: dict) -> float | None:
    moon = meta.get("bodies", {}).get("moon") or {}
    elements = moon.get("elements") or {}
    period = elements.get("period")
    return float(period) if period else None


def plot_moon_path(fig_dir: Path, ts: Dict[str, np.ndarray]) -> None:
    fig, ax = plt.subplots(figsize=(6, 6))
    ax.plot(ts["moon_x"], ts["moon_z"], color="#adb5bd", lw=1.5, label="Moon")
    ax.scatter([0.0], [0.0], color="#4a86f7", s=60, label="Earth")
    ax.set_aspect("equal", "box")
    ax.set_xlabel("x [world]")
    ax.set_ylabel("z [world]")
    ax.set_title("Moon path (x-z)")
    ax.legend()
    fig.tight_layout()
    fig.savefig(fig_dir / "moon_path_xz.png", dpi=150)
    plt.close(fig)


def plot_camera(fig_dir: Path, ts: Dict[str, np.ndarray], events: List[dict]) -> None:
    fig, (ax_r, ax_phi) = plt.subplots(2, 1, figsize=(7, 6), sharex=True)
    ax_r.plot(ts["clock"], ts["radius"], color="#4dabf7")
    ax_r.set_ylabel("radius [world]")
    ax_phi.plot(ts["clock"], np.degrees(ts["phi"]), color="#9775fa")
    ax_phi.set_ylabel("phi [deg]")
    ax_phi.set_xlabel("clock [s]")
    for event in events:
        if event["type"] == "mode_change":
            for ax in (ax_r, ax_phi):
                ax.axvline(event["t"], color="#d9480f", linestyle="--", alpha=0.5)
    ax_r.set_title("Camera radius and polar angle")
    for ax in (ax_r, ax_phi):
        ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(fig_dir / "camera.png", dpi=150)
    plt.close(fig)


def print_summary(
    run_dir: Path,
    T_theo: float | None,
    T_rec: float | None,
    degraded: int,
    event_summary: Dict[str, int],
) -> None:
    print(f"Run: {run_dir.name}")
    if T_theo is not None:
        print(f" Theoretical lunar period T = {T_theo:.1f} s ({T_theo / 86400.0:.3f} d)")
    else:
        print(" Theoretical lunar period: not available")
    if T_rec is not None:
        print(f" Recorded lunar period T_rec = {T_rec:.1f} s")
    else:
        print(" Recorded lunar period: needs two ascending crossings")
    print(f" Degraded frames: {degraded}")
    print(
        " Events:" + ", ".join(f" {etype}: {count}" for etype, count in sorted(event_summary.items()))
    )


def resolve_run_dir(run_arg: str | None, base_runs_dir: Path) -> Path | None:
    if run_arg:
        run_path = Path(run_arg)
        if not run_path.is_dir():
            run_path = base_runs_dir / run_arg
        return run_path
    last_run_file = base_runs_dir / "last_run.txt"
    if not last_run_file.exists():
        return None
    return base_runs_dir / last_run_file.read_text(encoding="utf-8").strip()


def main(argv: List[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Analyze a recorded run and write figures.")
    parser.add_argument("run_dir", nargs="?", help="Path to a specific run directory")
    parser.add_argument("--runs-dir", default="data/runs", help="Root directory of recorded runs")
    args = parser.parse_args(argv)

    run_path = resolve_run_dir(args.run_dir, Path(args.runs_dir))
    if run_path is None:
        parser.error("No run given and last_run.txt is missing.")
    if not run_path.is_dir():
        parser.error(f"Run directory not found: {run_path}")

    meta_path = run_path / META_FILENAME
    ts_path = run_path / TIMESERIES_FILENAME
    ev_path = run_path / EVENTS_FILENAME
    if not meta_path.exists() or not ts_path.exists() or not ev_path.exists():
        parser.error("Run directory is missing meta/timeseries/events files.")

    with meta_path.open("r", encoding="utf-8") as fh:
        meta = json.load(fh)
    ts = load_timeseries(ts_path)
    events = load_events(ev_path)
    if not ts or ts["clock"].size == 0:
        parser.error("timeseries.csv is empty, nothing to analyze.")

    fig_dir = ensure_fig_dir(run_path)
    plot_moon_path(fig_dir, ts)
    plot_camera(fig_dir, ts, events)

    degraded = int(np.sum(ts.get("degraded", np.array([]))))
    print_summary(run_path, theoretical_period(meta), estimate_period(ts), degraded, summarize_events(events))


if __name__ == "__main__":
    main()
