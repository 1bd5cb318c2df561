import pathlib

import pytest
from conftest import PUZZLE_4X4, PUZZLE_9X9, SOLUTION_4X4, SOLUTION_9X9, SOLVED_4X4

from dpll_sudoku import solver
from dpll_sudoku.clause import Clause
from dpll_sudoku.encoder import ParseError, Sudoku, cell_variable, encode, exactly_one, parse_puzzle
from dpll_sudoku.environment import Bool, Environment
from dpll_sudoku.literal import negative, positive


def test_cell_variable_is_stable():
    assert cell_variable(1, 2, 3) is cell_variable(1, 2, 3)
    assert cell_variable(1, 2, 3) != cell_variable(3, 2, 1)
    assert cell_variable(1, 11, 1) != cell_variable(11, 1, 1)


def test_exactly_one_clauses():
    xs = [cell_variable(1, 1, k) for k in range(1, 4)]
    clauses = exactly_one(xs)
    assert len(clauses) == 1 + 3
    assert clauses[0] == Clause.of(*(positive(x) for x in xs))
    assert Clause.of(negative(xs[0]), negative(xs[2])) in clauses


def test_clause_count_for_4x4():
    # 4 groups of 16 exactly-one constraints, each 1 + C(4, 2) clauses
    assert encode(2, []).size() == 4 * 16 * 7
    assert Sudoku(2, PUZZLE_4X4).problem().size() == 4 * 16 * 7 + 4


def test_clue_becomes_unit_clause():
    formula = encode(2, [(2, 3, 4)])
    units = [c for c in formula if c.is_unit()]
    assert units == [Clause.of(positive(cell_variable(2, 3, 4)))]


def test_encode_rejects_out_of_range_clue():
    with pytest.raises(ValueError):
        encode(2, [(1, 5, 1)])


def test_solved_grid_round_trips():
    puzzle = Sudoku(2, SOLVED_4X4)
    env = solver.solve(puzzle.problem())
    assert env is not None
    assert puzzle.interpret_solution(env) == puzzle


def test_partial_4x4_is_completed():
    puzzle = Sudoku(2, PUZZLE_4X4)
    env = solver.solve(puzzle.problem())
    assert puzzle.problem().evaluate(env) is Bool.TRUE
    assert puzzle.interpret_solution(env) == Sudoku(2, SOLUTION_4X4)


def test_two_digits_in_one_cell_is_unsatisfiable():
    assert solver.solve(encode(2, [(1, 1, 1), (1, 1, 2)])) is None


def test_row_conflict_is_unsatisfiable():
    grid = [row[:] for row in PUZZLE_4X4]
    grid[0][0] = 4  # second 4 in row 1
    assert solver.solve(Sudoku(2, grid).problem()) is None


def test_empty_grid_is_satisfiable():
    puzzle = Sudoku(2)
    solution = puzzle.interpret_solution(solver.solve(puzzle.problem()))
    assert solution.is_complete()


def test_9x9_puzzle():
    puzzle = Sudoku.from_string(PUZZLE_9X9)
    assert puzzle.dim == 3
    env = solver.solve(puzzle.problem())
    assert env is not None
    assert str(puzzle.interpret_solution(env)) == SOLUTION_9X9


def test_interpret_rejects_missing_solution():
    with pytest.raises(ParseError):
        Sudoku(2).interpret_solution(None)


def test_interpret_rejects_two_digits_in_a_cell():
    env = Environment().put_true(cell_variable(1, 1, 1)).put_true(cell_variable(1, 1, 2))
    with pytest.raises(ParseError, match="Multiple values"):
        Sudoku(2).interpret_solution(env)


def test_interpret_rejects_empty_cell():
    with pytest.raises(ParseError, match="empty value"):
        Sudoku(2).interpret_solution(Environment())


def test_interpret_ignores_unbound_and_false_variables():
    env = Environment()
    for r, row in enumerate(SOLVED_4X4, start=1):
        for c, digit in enumerate(row, start=1):
            env = env.put_true(cell_variable(r, c, digit))
    env = env.put_false(cell_variable(1, 1, 2))
    assert Sudoku(2).interpret_solution(env) == Sudoku(2, SOLVED_4X4)


def test_parse_compact_and_spaced_formats():
    compact = parse_puzzle(".1.4\n....\n2.3.\n....\n")
    spaced = parse_puzzle("0 1 0 4\n0 0 0 0\n2 0 3 0\n0 0 0 0\n")
    assert compact == spaced == PUZZLE_4X4


def test_parse_letters_for_large_grids():
    rows = ["ABCDEFG123456789"] + ["." * 16] * 15
    grid = parse_puzzle("\n".join(rows), 4)
    assert grid[0][:3] == [10, 11, 12]


@pytest.mark.parametrize("text", [
    "",
    ".1.\n...\n...\n",            # 3 is not a square
    ".1.4\n....\n2.3\n....\n",    # short row
    ".1.4\n....\n2.3.\n...9\n",   # digit out of range
    ".1.4\n....\n2.3.\n...?\n",   # bad character
    ".1.4\n....\n2.3.\n...\u00df\n",  # upper-cases to two letters
])
def test_parse_errors(text):
    with pytest.raises(ParseError):
        parse_puzzle(text)


def test_parse_wrong_dim():
    with pytest.raises(ParseError):
        parse_puzzle(".1.4\n....\n2.3.\n....\n", dim=3)


def test_sudoku_validates_shape():
    with pytest.raises(ValueError):
        Sudoku(2, [[0, 0], [0, 0]])
    with pytest.raises(ValueError):
        Sudoku(2, [[5, 0, 0, 0]] + [[0] * 4] * 3)


def test_from_file(tmp_path):
    path = tmp_path / "puzzle.txt"
    path.write_text(".1.4\n....\n2.3.\n....\n")
    puzzle = Sudoku.from_file(2, str(path))
    assert puzzle.rows() == PUZZLE_4X4
    assert puzzle.get(1, 2) == 1
    assert list(puzzle.clues()) == [(1, 2, 1), (1, 4, 4), (3, 1, 2), (3, 3, 3)]


def test_str():
    assert str(Sudoku(2, PUZZLE_4X4)) == ".1.4\n....\n2.3.\n....\n"


def test_sample_files_agree():
    samples = pathlib.Path(__file__).resolve().parent.parent / "samples"
    compact = Sudoku.from_file(2, str(samples / "sudoku_4x4.txt"))
    spaced = Sudoku.from_file(2, str(samples / "sudoku_4x4_spaced.txt"))
    assert compact == spaced == Sudoku(2, PUZZLE_4X4)
    assert Sudoku.from_file(3, str(samples / "sudoku_easy.txt")) == Sudoku.from_string(PUZZLE_9X9)
