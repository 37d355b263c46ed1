"""Output builders for the web API."""

from .result_builder import prepare_results, prepare_batch_results

__all__ = ["prepare_results", "prepare_batch_results"]
