"""Utils module for FIFA value analysis."""

from .metrics import RegressionEvaluator

__all__ = ['RegressionEvaluator']
