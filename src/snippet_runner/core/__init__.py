"""Core parsing and execution for snippet scripts."""
