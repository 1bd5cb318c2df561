"""Plot wall times from one or more metrics.csv files written by evaluate.py."""

import argparse
import pathlib
from typing import Dict, List, Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Plot solver wall times.")
    grouping = ap.add_mutually_exclusive_group(required=True)
    grouping.add_argument("--runs", action="store_true")  # one box per run, per grid size
    grouping.add_argument("--status", action="store_true")  # one box per solver status, per grid size
    ap.add_argument("--out", default="plots", help="Directory for the PNG files")
    ap.add_argument("paths", nargs="+", help="metrics.csv files or directories containing one")
    return ap.parse_args(argv)


def get_path(path: pathlib.Path) -> pathlib.Path:
    return path / "metrics.csv" if path.is_dir() else path


def load(paths: List[str]) -> pd.DataFrame:
    frames = []
    for p in paths:
        csv_path = get_path(pathlib.Path(p))
        raw = pd.read_csv(csv_path)
        raw["run"] = csv_path.parent.name or csv_path.stem
        frames.append(raw)
    return pd.concat(frames, ignore_index=True)


def get_data(frame: pd.DataFrame, size: int, column: str) -> Dict[str, pd.Series]:
    finished = frame[(frame["size"] == size) & frame["status"].isin(["SAT", "UNSAT"])]
    data = {}
    for key, group in finished.groupby(column):
        data[f"N{size} {key}"] = group["wall_time_s"]
    return data


def plot(data: Dict[str, pd.Series], file: pathlib.Path) -> Optional[pathlib.Path]:
    if len(data.keys()) == 0:
        return None
    raw = list(sorted(data.items(), key=lambda x: x[0]))
    labels = [x[0] for x in raw]

    plt.boxplot([x[1] for x in raw])
    plt.xticks(range(1, len(labels) + 1), labels)
    plt.ylabel("Seconds")
    plt.savefig(file)
    plt.clf()
    return file


def plot_all(frame: pd.DataFrame, column: str, outdir: pathlib.Path) -> List[pathlib.Path]:
    outdir.mkdir(parents=True, exist_ok=True)
    written = []
    for size in sorted(frame["size"].unique()):
        p = plot(get_data(frame, int(size), column), outdir / f"N{int(size)}_by_{column}.png")
        if p is not None:
            written.append(p)
    return written


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    frame = load(args.paths)
    column = "run" if args.runs else "status"
    for p in plot_all(frame, column, pathlib.Path(args.out)):
        print(f"Saved plot -> {p}")


if __name__ == "__main__":
    main()
