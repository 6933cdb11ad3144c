"""
FIFA Player Value Analysis Package
Feature engineering and cross-validated comparison of regression models
for football player market values.
"""

__version__ = "1.0.0"
__author__ = "FIFA Analytics Team"

# Import main classes for easy access
from .config import config
from .data.loader import DataLoader
from .data.preprocessor import DataPreprocessor
from .evaluation import EvaluationHarness, make_folds
from .pipeline import run_analysis

__all__ = [
    'config',
    'DataLoader',
    'DataPreprocessor',
    'EvaluationHarness',
    'make_folds',
    'run_analysis',
]
