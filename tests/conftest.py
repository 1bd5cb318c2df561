import itertools
from typing import Iterator, List

import pytest

from dpll_sudoku.environment import Environment
from dpll_sudoku.literal import Variable, negative, positive


@pytest.fixture
def a():
    return positive("a")


@pytest.fixture
def b():
    return positive("b")


@pytest.fixture
def c():
    return positive("c")


def all_environments(variables: List[Variable]) -> Iterator[Environment]:
    """Every total assignment of the given variables."""
    for values in itertools.product([True, False], repeat=len(variables)):
        env = Environment()
        for var, value in zip(variables, values):
            env = env.put_true(var) if value else env.put_false(var)
        yield env


SOLVED_4X4 = [
    [1, 2, 3, 4],
    [3, 4, 1, 2],
    [2, 1, 4, 3],
    [4, 3, 2, 1],
]

PUZZLE_4X4 = [
    [0, 1, 0, 4],
    [0, 0, 0, 0],
    [2, 0, 3, 0],
    [0, 0, 0, 0],
]

SOLUTION_4X4 = [
    [3, 1, 2, 4],
    [4, 2, 1, 3],
    [2, 4, 3, 1],
    [1, 3, 4, 2],
]

PUZZLE_9X9 = """\
53..7....
6..195...
.98....6.
8...6...3
4..8.3..1
7...2...6
.6....28.
...419..5
....8..79
"""

SOLUTION_9X9 = """\
534678912
672195348
198342567
859761423
426853791
713924856
961537284
287419635
345286179
"""
