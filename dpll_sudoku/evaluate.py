#!/usr/bin/env python3
"""
Evaluate the DPLL solver on randomly generated Sudoku puzzles.

This script generates puzzles, encodes them to CNF with `encoder.encode`,
runs `solver.solve`, and collects metrics and plots.

 - solved grids are generated locally by randomized backtracking (fast for dim 2, 3)
 - guaranteed-SAT puzzles come from masking a solved grid
 - guaranteed-UNSAT puzzles inject a duplicate digit into a row and force both
   conflicting cells to stay visible after masking
 - --unsat-proportion controls how many instances are provably UNSAT
 - per-instance ground-truth labels (expected SAT/UNSAT) are recorded and the
   labeled accuracy, a confusion matrix and timing summaries are printed

Outputs:
  - CSV with one row per instance (outdir/metrics.csv)
  - Plots (PNG): time_by_size.png, status_counts.png, time_vs_steps.png

Usage example:
  python -m dpll_sudoku.evaluate --dims 2 3 --instances-per-dim 20 --clue-density 0.5 \
      --suite-mode sat --unsat-proportion 0.2 --timeout 5 --outdir outputs
"""
from __future__ import annotations

import argparse
import csv
import os
import random
import signal
import time
from dataclasses import dataclass, asdict
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Set

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from . import solver as solver_mod  # noqa: E402
from .encoder import ParseError, Sudoku  # noqa: E402
from .environment import Bool  # noqa: E402


@dataclass
class InstanceResult:
    dim: int
    size: int
    clue_density: float
    n_clues: int
    num_vars: int
    n_clauses: int
    status: str
    wall_time_s: float
    search_steps: int
    substitute_calls: int
    select_clause_calls: int
    cnf_valid: Optional[bool] = None
    semantic_valid: Optional[bool] = None
    error: str = ""
    expected_status: Optional[str] = None  # 'SAT', 'UNSAT', or None
    is_correct: Optional[bool] = None     # True/False if expected known, else None


# ---------------------------
# Puzzle generation
# ---------------------------
def generate_solved_grid(
    dim: int,
    rng: Optional[random.Random] = None,
    max_tries: int = 200000,
    restarts: int = 50,
) -> Optional[List[List[int]]]:
    """MRV + backtracking generator with randomized restarts.

    - max_tries limits total backtrack steps per attempt.
    - restarts controls how many independent attempts we make (with different RNG state).
    """
    if rng is None:
        rng = random.Random()
    n = dim * dim
    digits = list(range(1, n + 1))

    def one_attempt(seed_offset: int = 0) -> Optional[List[List[int]]]:
        local_rng = random.Random(rng.randint(0, 2**31 - 1) ^ seed_offset)
        grid = [[0] * n for _ in range(n)]
        rows = [set() for _ in range(n)]
        cols = [set() for _ in range(n)]
        boxes = [[set() for _ in range(dim)] for _ in range(dim)]
        tries = 0

        def candidates_for(r: int, c: int) -> List[int]:
            can = [v for v in digits
                   if v not in rows[r] and v not in cols[c] and v not in boxes[r // dim][c // dim]]
            local_rng.shuffle(can)
            return can

        def find_mrv_cell() -> Optional[Tuple[int, int, List[int]]]:
            # (r, c, candidates) for the empty cell with the fewest candidates
            best = None
            for r in range(n):
                for c in range(n):
                    if grid[r][c] != 0:
                        continue
                    cand = candidates_for(r, c)
                    if len(cand) <= 1:
                        return (r, c, cand)
                    if best is None or len(cand) < len(best[2]):
                        best = (r, c, cand)
            return best

        def backtrack() -> bool:
            nonlocal tries
            cell = find_mrv_cell()
            if cell is None:
                return True  # filled everything
            r, c, cand = cell
            if not cand:
                return False
            tries += 1
            if tries > max_tries:
                return False
            for v in cand:
                grid[r][c] = v
                rows[r].add(v); cols[c].add(v); boxes[r // dim][c // dim].add(v)
                if backtrack():
                    return True
                grid[r][c] = 0
                rows[r].remove(v); cols[c].remove(v); boxes[r // dim][c // dim].remove(v)
            return False

        return grid if backtrack() else None

    for attempt in range(restarts):
        res = one_attempt(attempt)
        if res is not None:
            return res
    return None


def mask_grid(grid: List[List[int]], density: float, rng: Optional[random.Random] = None) -> List[List[int]]:
    """Mask a solved grid according to density -> returns a puzzle with zeros where masked."""
    return mask_grid_with_forced(grid, density, (), rng)


def mask_grid_with_forced(
    grid: List[List[int]], density: float, forced_cells: Iterable[Tuple[int, int]], rng: Optional[random.Random] = None
) -> List[List[int]]:
    """Mask a solved grid but always reveal the given forced_cells as clues."""
    if rng is None:
        rng = random.Random()
    forced: Set[Tuple[int, int]] = set(forced_cells)
    n = len(grid)
    out = [[0] * n for _ in range(n)]
    for r in range(n):
        for c in range(n):
            if (r, c) in forced or rng.random() < density:
                out[r][c] = grid[r][c]
    return out


def make_unsat_with_forced_conflict(
    grid: List[List[int]], rng: Optional[random.Random] = None
) -> Tuple[List[List[int]], List[Tuple[int, int]]]:
    """Duplicate a digit inside one row and return the two cells to keep as clues.

    Keeping both cells visible guarantees the puzzle is UNSAT.
    """
    if rng is None:
        rng = random.Random()
    n = len(grid)
    new_grid = [row[:] for row in grid]
    r = rng.randrange(n)
    c1, c2 = rng.sample(range(n), 2)
    new_grid[r][c1] = new_grid[r][c2]
    return new_grid, [(r, c1), (r, c2)]


def generate_random_puzzle(dim: int, density: float, rng: random.Random) -> List[List[int]]:
    """Each cell is a clue with probability `density`; clues are uniform in 1..N."""
    n = dim * dim
    return [[rng.randint(1, n) if rng.random() < density else 0 for _c in range(n)] for _r in range(n)]


# ---------------------------
# Verification
# ---------------------------
def verify_grid_semantics(grid: List[List[int]], clues: List[List[int]]) -> bool:
    """Verify Sudoku rules and clues on a filled grid."""
    n = len(grid)
    dim = int(n ** 0.5)
    if dim * dim != n:
        return False
    full = set(range(1, n + 1))
    for r in range(n):
        for c in range(n):
            if clues[r][c] != 0 and grid[r][c] != clues[r][c]:
                return False
    if any(set(row) != full for row in grid):
        return False
    if any({grid[r][c] for r in range(n)} != full for c in range(n)):
        return False
    for br in range(0, n, dim):
        for bc in range(0, n, dim):
            if {grid[br + dr][bc + dc] for dr in range(dim) for dc in range(dim)} != full:
                return False
    return True


def clues_have_semantic_conflict(clues: List[List[int]]) -> bool:
    """True if the clues alone already repeat a digit in a row, column or box.

    If True, the puzzle is guaranteed UNSAT; otherwise, it may still be SAT or UNSAT.
    """
    n = len(clues)
    dim = int(n ** 0.5)
    groups: List[List[int]] = []
    groups.extend(clues[r] for r in range(n))
    groups.extend([clues[r][c] for r in range(n)] for c in range(n))
    for br in range(0, n, dim):
        for bc in range(0, n, dim):
            groups.append([clues[br + dr][bc + dc] for dr in range(dim) for dc in range(dim)])
    for group in groups:
        given = [v for v in group if v != 0]
        if len(given) != len(set(given)):
            return True
    return False


# ---------------------------
# Instrumentation wrappers for the solver
# ---------------------------
_INSTRUMENTED = {
    "has_empty_clause": "search_steps",
    "substitute": "substitute_calls",
    "select_clause": "select_clause_calls",
}


def _make_instrumentation() -> Tuple[Dict[str, int], Dict[str, Callable], Dict[str, Callable]]:
    counters = {counter: 0 for counter in _INSTRUMENTED.values()}
    originals: Dict[str, Callable] = {}
    wrappers: Dict[str, Callable] = {}

    for name, counter in _INSTRUMENTED.items():
        original = getattr(solver_mod, name)
        originals[name] = original

        def wrap(*args, _original=original, _counter=counter):
            counters[_counter] += 1
            return _original(*args)

        wrappers[name] = wrap

    return counters, originals, wrappers


def _apply_wrappers(wrappers: Dict[str, Callable]) -> None:
    for name, func in wrappers.items():
        setattr(solver_mod, name, func)


def _restore_originals(originals: Dict[str, Callable]) -> None:
    for name, func in originals.items():
        setattr(solver_mod, name, func)


# ---------------------------
# Timeout helpers
# ---------------------------
class Timeout(Exception):
    pass


def _timeout_handler(signum, frame):  # noqa: ARG001
    raise Timeout()


# ---------------------------
# Run / evaluation logic
# ---------------------------
def run_one_instance(
    grid: List[List[int]],
    timeout_s: Optional[float],
    expected_status: Optional[str] = None,
) -> InstanceResult:
    n = len(grid)
    dim = int(n ** 0.5)
    n_clues = sum(1 for row in grid for v in row if v != 0)
    counters, originals, wrappers = _make_instrumentation()

    def result(status: str, wall_time: float = 0.0, num_vars: int = 0, n_clauses: int = 0, **extra) -> InstanceResult:
        is_correct: Optional[bool] = None
        if expected_status in ("SAT", "UNSAT"):
            is_correct = (status == expected_status)
        return InstanceResult(
            dim=dim,
            size=n,
            clue_density=n_clues / (n * n),
            n_clues=n_clues,
            num_vars=num_vars,
            n_clauses=n_clauses,
            status=status,
            wall_time_s=wall_time,
            expected_status=expected_status,
            is_correct=is_correct,
            **counters,
            **extra,
        )

    try:
        sudoku = Sudoku(dim, grid)
        formula = sudoku.problem()
    except ValueError as e:
        return result("ERROR", error=f"encode: {type(e).__name__}: {e}")
    num_vars = len(formula.variables())
    n_clauses = formula.size()

    # Solve with timeout
    _apply_wrappers(wrappers)
    started = time.perf_counter()
    old_handler = None
    env = None
    try:
        if timeout_s and timeout_s > 0 and hasattr(signal, "SIGALRM"):
            old_handler = signal.signal(signal.SIGALRM, _timeout_handler)
            signal.alarm(max(1, int(timeout_s)))
        env = solver_mod.solve(formula)
        status = "SAT" if env is not None else "UNSAT"
    except Timeout:
        status = "TIMEOUT"
    finally:
        wall_time = time.perf_counter() - started
        if hasattr(signal, "SIGALRM") and old_handler is not None:
            signal.alarm(0)
            signal.signal(signal.SIGALRM, old_handler)
        _restore_originals(originals)

    if env is None:
        return result(status, wall_time, num_vars, n_clauses)

    cnf_valid = formula.evaluate(env) is Bool.TRUE
    try:
        solution = sudoku.interpret_solution(env)
        semantic_valid = verify_grid_semantics(solution.rows(), grid)
    except ParseError:
        semantic_valid = False
    return result(status, wall_time, num_vars, n_clauses, cnf_valid=cnf_valid, semantic_valid=semantic_valid)


def save_csv(rows: List[InstanceResult], path: str) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    fieldnames = list(InstanceResult.__dataclass_fields__.keys())
    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for r in rows:
            writer.writerow(asdict(r))


def make_plots(rows: List[InstanceResult], outdir: str) -> List[str]:
    os.makedirs(outdir, exist_ok=True)
    paths: List[str] = []
    solved = [r for r in rows if r.status in ("SAT", "UNSAT")]

    # Time distributions by N (boxplot)
    by_n: Dict[int, List[float]] = {}
    for r in solved:
        by_n.setdefault(r.size, []).append(r.wall_time_s)
    if by_n:
        labels = sorted(by_n.keys())
        plt.figure(figsize=(6, 4))
        plt.boxplot([by_n[n] for n in labels], showfliers=False)
        plt.xticks(range(1, len(labels) + 1), [str(l) for l in labels])
        plt.title("Solve time by size (finished runs)")
        plt.xlabel("N")
        plt.ylabel("Seconds")
        p = os.path.join(outdir, "time_by_size.png")
        plt.tight_layout()
        plt.savefig(p)
        plt.close()
        paths.append(p)

    # Status counts by N (bar chart)
    statuses = ["SAT", "UNSAT", "TIMEOUT", "ERROR"]
    counts: Dict[int, Dict[str, int]] = {}
    for r in rows:
        d = counts.setdefault(r.size, {s: 0 for s in statuses})
        d[r.status] = d.get(r.status, 0) + 1
    if counts:
        ns = sorted(counts.keys())
        width = 0.2
        x = range(len(ns))
        plt.figure(figsize=(7, 4))
        for i, s in enumerate(statuses):
            plt.bar([xi + i * width for xi in x], [counts[n].get(s, 0) for n in ns], width=width, label=s)
        plt.xticks([xi + 1.5 * width for xi in x], [str(n) for n in ns])
        plt.xlabel("N")
        plt.ylabel("Count")
        plt.title("Status counts by size")
        plt.legend()
        p = os.path.join(outdir, "status_counts.png")
        plt.tight_layout()
        plt.savefig(p)
        plt.close()
        paths.append(p)

    # Scatter: time vs search steps (colored by N)
    if solved:
        plt.figure(figsize=(6, 4))
        sc = plt.scatter([r.search_steps for r in solved], [r.wall_time_s for r in solved],
                         c=[r.size for r in solved], cmap="viridis", alpha=0.7)
        plt.xlabel("search steps (instrumented)")
        plt.ylabel("Seconds")
        plt.title("Time vs search steps")
        cbar = plt.colorbar(sc)
        cbar.set_label("N")
        p = os.path.join(outdir, "time_vs_steps.png")
        plt.tight_layout()
        plt.savefig(p)
        plt.close()
        paths.append(p)

    return paths


def make_instance(
    dim: int, base_solution: Optional[List[List[int]]], args: argparse.Namespace, rng: random.Random
) -> Tuple[List[List[int]], Optional[str]]:
    """Return (puzzle, expected status) for one instance of the suite."""
    if base_solution is None:
        grid = generate_random_puzzle(dim, args.clue_density, rng)
        return grid, ("UNSAT" if clues_have_semantic_conflict(grid) else None)
    if rng.random() < args.unsat_proportion:
        conflict_solution, forced = make_unsat_with_forced_conflict(base_solution, rng=rng)
        return mask_grid_with_forced(conflict_solution, args.clue_density, forced, rng=rng), "UNSAT"
    # Masked from a valid solved grid -> definitely SAT
    return mask_grid(base_solution, args.clue_density, rng=rng), "SAT"


def summarize(results: List[InstanceResult]) -> None:
    labeled = [r for r in results if r.expected_status in ("SAT", "UNSAT")]
    if not labeled:
        return
    correct = sum(1 for r in labeled if r.status == r.expected_status)
    print(f"Labeled accuracy: {correct}/{len(labeled)} = {correct / len(labeled):.3f}")

    # Confusion matrix (expected vs predicted)
    conf: Dict[str, Dict[str, int]] = {}
    for r in labeled:
        conf.setdefault(r.expected_status or "?", {})
        conf[r.expected_status or "?"][r.status] = conf[r.expected_status or "?"].get(r.status, 0) + 1
    for exp in ("SAT", "UNSAT"):
        row = conf.get(exp, {})
        print(f"Expected {exp}: predicted SAT={row.get('SAT', 0)}, UNSAT={row.get('UNSAT', 0)}, "
              f"TIMEOUT={row.get('TIMEOUT', 0)}, ERROR={row.get('ERROR', 0)}")

    for s in ("SAT", "UNSAT"):
        times = [r.wall_time_s for r in results if r.status == s]
        if times:
            print(f"Mean time (predicted {s}): {sum(times) / len(times):.3f}s over {len(times)} instances")

    invalid = [r for r in results if r.status == "SAT" and not (r.cnf_valid and r.semantic_valid)]
    if invalid:
        print(f"WARNING: {len(invalid)} SAT results failed verification")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Evaluate the DPLL Sudoku solver on random instances.")
    ap.add_argument("--dims", nargs="*", type=int, default=[2, 3], help="Box sizes to test (2 -> 4x4, 3 -> 9x9)")
    ap.add_argument("--instances-per-dim", type=int, default=10, help="How many instances per box size")
    ap.add_argument("--clue-density", type=float, default=0.5, help="Probability a cell is a clue (0..1)")
    ap.add_argument("--seed", type=int, default=None, help="Random seed")
    ap.add_argument("--timeout", type=float, default=10.0, help="Per-instance timeout in seconds (Unix only)")
    ap.add_argument("--outdir", type=str, default="outputs", help="Output dir for CSV and plots")
    ap.add_argument("--no-plots", action="store_true", help="Skip plotting")
    ap.add_argument("--suite-mode", choices=["random", "sat"], default="sat",
                    help="random: independently random clues; sat: clues masked from a solved grid")
    ap.add_argument("--unsat-proportion", type=float, default=0.0,
                    help="Proportion (0..1) of instances that should be guaranteed-UNSAT (suite-mode=sat)")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    rng = random.Random(args.seed)
    results: List[InstanceResult] = []

    for dim in args.dims:
        if dim < 2:
            print(f"[skip] dim={dim} is too small; skipping.")
            continue

        base_solution: Optional[List[List[int]]] = None
        if args.suite_mode == "sat":
            start_g = time.perf_counter()
            base_solution = generate_solved_grid(dim, rng)
            if base_solution is None:
                print(f"dim={dim}: failed to produce solved grid; falling back to random suite.")
            else:
                print(f"dim={dim}: generated base solved grid in {time.perf_counter() - start_g:.3f}s.")

        for i in range(args.instances_per_dim):
            grid, expected = make_instance(dim, base_solution, args, rng)
            res = run_one_instance(grid, args.timeout, expected_status=expected)
            results.append(res)
            print(f"dim={dim} [{i + 1}/{args.instances_per_dim}] -> {res.status} in {res.wall_time_s:.3f}s, "
                  f"clauses={res.n_clauses}")

    csv_path = os.path.join(args.outdir, "metrics.csv")
    save_csv(results, csv_path)
    print(f"Saved metrics CSV -> {csv_path}")

    if not args.no_plots:
        for p in make_plots(results, args.outdir):
            print(f"Saved plot -> {p}")

    summarize(results)


if __name__ == "__main__":
    main()
