"""Snippet script tokenizer.

A snippet script is a semicolon-delimited list of calls. Each call is a
name followed by whitespace-separated arguments. Arguments may be quoted
with single quotes and may contain backslash escapes, including 4-digit
``\\uXXXX`` escapes::

    hide-if-contains 'Sponsored' div.feed; log 'line one\\nline two'

Parsing is lenient: malformed escapes and unterminated quotes never raise,
they only affect the call they occur in.
"""

from __future__ import annotations

import logging
import re

from snippet_runner.schemas.snippet import Snippet

logger = logging.getLogger(__name__)

_SINGLE_CHARACTER_ESCAPES: dict[str, str] = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

_UNICODE_ESCAPE_LENGTH = 4

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")

# Separators between arguments. Unlike str.isspace, the information
# separators \x1c-\x1f and NEL are not whitespace here, but BOM is.
_WHITESPACE = (
    "\t\n\v\f\r \u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def _decode_hex_escape(sequence: str) -> str | None:
    """Decode the 4 characters following ``\\u``.

    Uses the longest leading run of hex digits, after optional leading
    whitespace, sign and ``0x`` prefix. Returns None when nothing usable
    is found.
    """
    text = sequence.lstrip(_WHITESPACE)
    negative = text.startswith("-")
    if text.startswith(("+", "-")):
        text = text[1:]
    if text[:2].lower() == "0x":
        text = text[2:]

    match = _HEX_DIGITS.match(text)
    if match is None:
        return None

    code_point = int(match.group(), 16)
    if negative and code_point:
        return None
    return chr(code_point)


def tokenize_script(script: str) -> list[list[str]]:
    """Split a script into raw calls.

    Args:
        script: The script source

    Returns:
        List of calls, each a list of ``[name, *args]`` strings in source order

    Raises:
        TypeError: If script is not a string
    """
    if not isinstance(script, str):
        raise TypeError(f"Script must be a string, got {type(script).__name__}")

    tree: list[list[str]] = []

    escape = False
    within_quotes = False
    unicode_escape: str | None = None
    quotes_closed = False

    call: list[str] = []
    argument: list[str] = []

    # The implicit terminator flushes the last call
    for character in script.strip(_WHITESPACE) + ";":
        after_quotes_closed = quotes_closed
        quotes_closed = False

        if unicode_escape is not None:
            unicode_escape += character

            if len(unicode_escape) == _UNICODE_ESCAPE_LENGTH:
                decoded = _decode_hex_escape(unicode_escape)
                if decoded is not None:
                    argument.append(decoded)
                unicode_escape = None
        elif escape:
            escape = False

            if character == "u":
                unicode_escape = ""
            else:
                argument.append(_SINGLE_CHARACTER_ESCAPES.get(character, character))
        elif character == "\\":
            escape = True
        elif character == "'":
            within_quotes = not within_quotes

            if not within_quotes:
                quotes_closed = True
        elif within_quotes or (character != ";" and character not in _WHITESPACE):
            argument.append(character)
        else:
            # '' leaves argument empty, so the closed-quotes flag keeps it
            if argument or after_quotes_closed:
                call.append("".join(argument))
                argument = []

            if character == ";" and call:
                tree.append(call)
                call = []

    return tree


def parse_script(script: str) -> list[Snippet]:
    """Parse a script into snippets, in source order.

    Calls whose name is empty (for example a script starting with ``''``)
    cannot form a snippet and are dropped.
    """
    snippets: list[Snippet] = []
    for call in tokenize_script(script):
        if not call[0]:
            logger.debug("Dropping call with empty name: %r", call)
            continue
        snippets.append(Snippet.from_call(call))
    return snippets
