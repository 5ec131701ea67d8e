"""CLI module for eunoia."""
