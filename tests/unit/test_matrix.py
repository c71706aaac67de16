import numpy as np
import pytest

from layerwise.core.matrix import DimensionMismatch, Matrix


def test_multiply_and_transpose():
    a = Matrix([[1.0, 2.0], [3.0, 4.0]])
    b = Matrix([[5.0], [6.0]])
    assert a.multiply(b) == Matrix([[17.0], [39.0]])
    assert a.transpose().shape == (2, 2)
    assert b.T.shape == (1, 2)


def test_transpose_of_product_reverses_operands():
    rng = np.random.default_rng(0)
    a = Matrix(rng.standard_normal((3, 4)))
    b = Matrix(rng.standard_normal((4, 2)))
    np.testing.assert_allclose(
        a.multiply(b).transpose().to_array(), b.transpose().multiply(a.transpose()).to_array()
    )


def test_shape_mismatch_is_a_value_error():
    a = Matrix.ones(2, 3)
    with pytest.raises(DimensionMismatch):
        a.multiply(Matrix.ones(2, 3))
    with pytest.raises(ValueError):
        a.hadamard(Matrix.ones(3, 2))
    with pytest.raises(DimensionMismatch):
        a.add(Matrix.ones(1, 3))


def test_elementwise_operations_keep_operands_untouched():
    a = Matrix([[1.0, -2.0]])
    b = Matrix([[3.0, 4.0]])
    assert a.hadamard(b) == Matrix([[3.0, -8.0]])
    assert a.subtract(b) == Matrix([[-2.0, -6.0]])
    assert a.scalar_multiply(2) == Matrix([[2.0, -4.0]])
    assert a.scalar_add(1) == Matrix([[2.0, -1.0]])
    assert a == Matrix([[1.0, -2.0]])


def test_row_exclude_and_augment_below():
    a = Matrix([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
    assert a.row_exclude(-1) == Matrix([[1.0, 2.0], [3.0, 4.0]])
    assert a.row_exclude(0).m == 2
    with pytest.raises(DimensionMismatch):
        a.row_exclude(3)

    stacked = a.row_exclude(-1).augment_below(Matrix.ones(1, 2))
    assert stacked.shape == (3, 2)
    np.testing.assert_array_equal(stacked.row(2), [1.0, 1.0])
    with pytest.raises(DimensionMismatch):
        a.augment_below(Matrix.ones(1, 3))


def test_map_rejects_shape_changes():
    a = Matrix.ones(2, 2)
    assert a.map(lambda x: x * 3).sum() == pytest.approx(12.0)
    with pytest.raises(DimensionMismatch):
        a.map(lambda x: x.sum(axis=0))


def test_max_norm_and_empty_matrix():
    assert Matrix([[1.0, -7.5], [2.0, 3.0]]).max_norm() == 7.5
    assert Matrix([]).max_norm() == 0.0


def test_uniform_stays_within_bound():
    rng = np.random.default_rng(0)
    m = Matrix.uniform(20, 30, 0.25, rng)
    assert m.shape == (20, 30)
    assert m.max_norm() <= 0.25


def test_matrix_is_unhashable_and_array_compatible():
    m = Matrix([[1.0, 2.0]])
    with pytest.raises(TypeError):
        hash(m)
    arr = np.asarray(m)
    arr[0, 0] = 99.0
    assert m.to_array()[0, 0] == 1.0


def test_factories_and_list_views():
    m = Matrix.from_rows(iter([[1, 2], [3, 4]]))
    assert m.as_lists() == [[1.0, 2.0], [3.0, 4.0]]
    assert Matrix.zeros(2, 3).sum() == 0.0
    assert Matrix.ones(2, 3).sum() == 6.0
    copy = m.copy()
    assert copy == m and copy is not m
