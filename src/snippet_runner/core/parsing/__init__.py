"""Snippet script parsing."""

from snippet_runner.core.parsing.script_parser import parse_script, tokenize_script

__all__ = ["parse_script", "tokenize_script"]
