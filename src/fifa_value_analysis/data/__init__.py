"""Data module for FIFA value analysis."""

from .loader import DataLoader
from .preprocessor import DataPreprocessor, DesignMatrix

__all__ = ['DataLoader', 'DataPreprocessor', 'DesignMatrix']
