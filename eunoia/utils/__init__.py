"""Utility functions for eunoia."""

from eunoia.utils.helpers import ensure_dir, get_data_path, safe_filename, utcnow

__all__ = ["ensure_dir", "get_data_path", "safe_filename", "utcnow"]
