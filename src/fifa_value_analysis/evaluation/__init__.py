"""Fold partitioning and the cross-validated evaluation harness."""

from .folds import FoldPartition, make_folds
from .harness import EvaluationHarness, EvaluationResult, ModelRun

__all__ = ['FoldPartition', 'make_folds', 'EvaluationHarness', 'EvaluationResult', 'ModelRun']
