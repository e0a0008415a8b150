"""Batch pipeline package.

This package runs document normalization over many files with a bounded
worker pool and folds the per-file outcomes into one summary.
"""

from .orchestrator import PATTERN_MISS_MESSAGE, BatchOrchestrator, summarize_results

__all__ = ["BatchOrchestrator", "PATTERN_MISS_MESSAGE", "summarize_results"]
