import pytest

from dpll_sudoku.environment import Bool, Environment
from dpll_sudoku.literal import Variable

x = Variable.of("x")
y = Variable.of("y")


def test_unbound_is_undefined():
    assert Environment().get(x) is Bool.UNDEFINED
    assert x not in Environment()


def test_put_returns_new_environment():
    empty = Environment()
    bound = empty.put_true(x)
    assert bound.get(x) is Bool.TRUE
    assert empty.get(x) is Bool.UNDEFINED
    assert len(empty) == 0
    assert len(bound) == 1


def test_branches_do_not_share_bindings():
    base = Environment().put_true(x)
    left = base.put_true(y)
    right = base.put_false(y)
    assert left.get(y) is Bool.TRUE
    assert right.get(y) is Bool.FALSE
    assert base.get(y) is Bool.UNDEFINED


def test_rebinding_same_value_is_a_no_op():
    env = Environment().put_false(x)
    assert env.put_false(x) is env


def test_rebinding_opposite_value_fails():
    env = Environment().put_true(x)
    with pytest.raises(ValueError):
        env.put_false(x)


def test_binding_undefined_fails():
    with pytest.raises(ValueError):
        Environment().put(x, Bool.UNDEFINED)


def test_bool_negation():
    assert Bool.TRUE.negation() is Bool.FALSE
    assert Bool.FALSE.negation() is Bool.TRUE
    assert Bool.UNDEFINED.negation() is Bool.UNDEFINED


def test_equality_and_items():
    env = Environment().put_true(x).put_false(y)
    assert env == Environment().put_false(y).put_true(x)
    assert dict(env.items()) == {x: Bool.TRUE, y: Bool.FALSE}
    assert set(env) == {x, y}
    assert repr(env) == "Environment{x: True, y: False}"
