# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Text cleanup for assignment text before it is embedded in a JSON payload.

pdftotext output routinely contains form feeds between pages, carriage
returns, NUL bytes and other control characters. sanitize() removes them
while keeping non-ASCII letters intact.
"""

import re
import unicodedata

START_MARKER = "<<<ASSIGNMENT_START>>>"
END_MARKER = "<<<ASSIGNMENT_END>>>"

_LINE_BREAKS = re.compile(r"\r\n|\r|\f|\v|\u2028|\u2029")
_WHITESPACE_RUN = re.compile(r"\s+")
_KEPT_CONTROLS = {"\n", "\t"}
# Cc: control characters, Cs: lone surrogates (cannot be UTF-8 encoded)
_DROPPED_CATEGORIES = {"Cc", "Cs"}


def _strip_unsafe_characters(text: str) -> str:
    return "".join(
        ch
        for ch in text
        if ch in _KEPT_CONTROLS or unicodedata.category(ch) not in _DROPPED_CATEGORIES
    )


def is_wrapped(text: str) -> bool:
    return text.startswith(START_MARKER) and text.endswith(END_MARKER)


def sanitize(raw_text: str, single_line: bool = True, wrap: bool = False) -> str:
    """
    Clean raw document text.

    Args:
        raw_text: Text as produced by the PDF converter
        single_line: Collapse all whitespace (newlines included) to single
            spaces so the result fits on one line
        wrap: Surround the result with START_MARKER/END_MARKER so the
            receiver can find the free text inside a larger prompt

    Returns:
        The cleaned text. Empty input gives an empty string.
    """
    if not raw_text:
        return ""

    text = raw_text.replace("\x00", "")
    text = _LINE_BREAKS.sub(" " if single_line else "\n", text)
    text = _strip_unsafe_characters(text)
    if single_line:
        text = _WHITESPACE_RUN.sub(" ", text)
    text = text.strip()

    if wrap and text and not is_wrapped(text):
        text = f"{START_MARKER} {text} {END_MARKER}"
    return text
