"""Serverless nugget functions."""

from eunoia.functions.app import CallableError, create_app

__all__ = ["CallableError", "create_app"]
