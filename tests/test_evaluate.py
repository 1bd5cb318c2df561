import csv
import random

from conftest import PUZZLE_4X4, SOLVED_4X4

from dpll_sudoku import evaluate
from dpll_sudoku import solver as solver_mod


def test_generate_solved_grid_is_valid():
    grid = evaluate.generate_solved_grid(2, random.Random(7))
    assert grid is not None
    assert evaluate.verify_grid_semantics(grid, [[0] * 4 for _ in range(4)])


def test_mask_grid_keeps_forced_cells():
    puzzle = evaluate.mask_grid_with_forced(SOLVED_4X4, 0.0, [(0, 0), (3, 3)], random.Random(1))
    assert puzzle[0][0] == 1 and puzzle[3][3] == 1
    assert sum(1 for row in puzzle for v in row if v) == 2
    assert evaluate.mask_grid(SOLVED_4X4, 1.0) == SOLVED_4X4


def test_forced_conflict_is_detected():
    grid, forced = evaluate.make_unsat_with_forced_conflict(SOLVED_4X4, random.Random(3))
    clues = evaluate.mask_grid_with_forced(grid, 0.0, forced)
    assert evaluate.clues_have_semantic_conflict(clues)
    assert not evaluate.clues_have_semantic_conflict(PUZZLE_4X4)


def test_verify_rejects_broken_grid():
    broken = [row[:] for row in SOLVED_4X4]
    broken[0][0], broken[0][1] = broken[0][1], broken[0][0]
    assert not evaluate.verify_grid_semantics(broken, [[0] * 4 for _ in range(4)])
    assert not evaluate.verify_grid_semantics(SOLVED_4X4, PUZZLE_4X4)


def test_run_sat_instance():
    originals = {name: getattr(solver_mod, name) for name in ("has_empty_clause", "substitute", "select_clause")}
    res = evaluate.run_one_instance(PUZZLE_4X4, None, expected_status="SAT")
    assert res.status == "SAT"
    assert res.is_correct
    assert res.cnf_valid and res.semantic_valid
    assert res.n_clues == 4
    assert res.num_vars == 64
    assert res.n_clauses == 448 + 4
    assert res.search_steps > 0 and res.substitute_calls > 0 and res.select_clause_calls > 0
    for name, func in originals.items():
        assert getattr(solver_mod, name) is func


def test_run_unsat_instance():
    grid = [row[:] for row in PUZZLE_4X4]
    grid[0][0] = 1
    res = evaluate.run_one_instance(grid, 5, expected_status="UNSAT")
    assert res.status == "UNSAT"
    assert res.is_correct
    assert res.cnf_valid is None


def test_run_reports_bad_grid():
    res = evaluate.run_one_instance([[9, 0, 0, 0]] + [[0] * 4] * 3, None)
    assert res.status == "ERROR"
    assert res.error.startswith("encode:")
    assert res.is_correct is None


def test_main_writes_csv(tmp_path, capsys):
    evaluate.main(["--dims", "2", "--instances-per-dim", "3", "--seed", "1", "--timeout", "0",
                   "--unsat-proportion", "0.5", "--outdir", str(tmp_path), "--no-plots"])
    with open(tmp_path / "metrics.csv", newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 3
    assert all(row["status"] == row["expected_status"] for row in rows)
    assert "Labeled accuracy: 3/3" in capsys.readouterr().out


def test_make_plots(tmp_path):
    results = [evaluate.run_one_instance(SOLVED_4X4, None), evaluate.run_one_instance(PUZZLE_4X4, None)]
    paths = evaluate.make_plots(results, str(tmp_path))
    assert [p.rsplit("/", 1)[-1] for p in paths] == ["time_by_size.png", "status_counts.png", "time_vs_steps.png"]
