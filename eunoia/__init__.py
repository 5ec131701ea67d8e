"""Eunoia: local-first journaling core with learning nuggets and vision boards."""

__version__ = "0.1.0"
__app_name__ = "eunoia"
