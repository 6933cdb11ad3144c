"""
Tests for the outer fold partition.
"""
import numpy as np
import pytest

from fifa_value_analysis.evaluation.folds import FoldPartition, make_folds


@pytest.mark.parametrize("n_rows, n_folds", [(20, 20), (157, 20), (101, 7), (3, 3)])
def test_every_row_in_exactly_one_fold(n_rows, n_folds):
    partition = make_folds(n_rows, n_folds, seed=42)

    assert partition.n_rows == n_rows
    seen = np.concatenate([partition.test_indices(k) for k in range(n_folds)])
    assert sorted(seen.tolist()) == list(range(n_rows))


@pytest.mark.parametrize("n_rows, n_folds", [(157, 20), (101, 7), (40, 20)])
def test_sizes_differ_by_at_most_one(n_rows, n_folds):
    sizes = make_folds(n_rows, n_folds, seed=0).sizes()
    assert sizes.sum() == n_rows
    assert sizes.max() - sizes.min() <= 1
    assert sizes.min() >= 1


def test_same_seed_same_partition():
    a = make_folds(200, 20, seed=7)
    b = make_folds(200, 20, seed=7)
    np.testing.assert_array_equal(a.assignments, b.assignments)


def test_different_seed_different_partition():
    a = make_folds(200, 20, seed=1)
    b = make_folds(200, 20, seed=2)
    assert not np.array_equal(a.assignments, b.assignments)


def test_split_complements():
    partition = make_folds(50, 5, seed=3)
    folds = list(partition.split())

    assert len(folds) == 5
    for train, test in folds:
        assert not set(train) & set(test)
        assert len(train) + len(test) == 50


@pytest.mark.parametrize("n_rows, n_folds", [(10, 1), (10, 0), (5, 6)])
def test_invalid_fold_counts(n_rows, n_folds):
    with pytest.raises(ValueError):
        make_folds(n_rows, n_folds, seed=0)


def test_partition_is_read_only():
    source = np.array([0, 1, 0, 1])
    partition = FoldPartition(assignments=source, n_folds=2)

    with pytest.raises(ValueError):
        partition.assignments[0] = 1
    source[0] = 1
    assert partition.assignments[0] == 0


def test_fold_ids_validated():
    with pytest.raises(ValueError):
        FoldPartition(assignments=np.array([0, 2]), n_folds=2)


def test_to_series():
    series = make_folds(10, 2, seed=0).to_series()
    assert series.name == "fold"
    assert series.value_counts().tolist() == [5, 5]
