"""JSON with comments (JSONC) helpers.

OpenCode and oh-my-opencode accept ``//`` and ``/* */`` comments and
trailing commas in their config files.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def strip_jsonc_comments(content: str) -> str:
    """Remove ``//`` line comments and ``/* */`` block comments outside strings."""
    result: list[str] = []
    i = 0
    length = len(content)
    in_string = False

    while i < length:
        char = content[i]

        if in_string:
            result.append(char)
            if char == "\\" and i + 1 < length:
                result.append(content[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        if char == '"':
            in_string = True
            result.append(char)
            i += 1
            continue

        if char == "/" and i + 1 < length and content[i + 1] == "/":
            while i < length and content[i] != "\n":
                i += 1
            continue

        if char == "/" and i + 1 < length and content[i + 1] == "*":
            end = content.find("*/", i + 2)
            i = length if end == -1 else end + 2
            continue

        result.append(char)
        i += 1

    return "".join(result)


def _strip_trailing_commas(content: str) -> str:
    """Drop commas followed only by whitespace and a closing bracket, outside strings."""
    result: list[str] = []
    i = 0
    length = len(content)
    in_string = False

    while i < length:
        char = content[i]

        if in_string:
            result.append(char)
            if char == "\\" and i + 1 < length:
                result.append(content[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        if char == '"':
            in_string = True
        elif char == ",":
            j = i + 1
            while j < length and content[j].isspace():
                j += 1
            if j < length and content[j] in "}]":
                i += 1
                continue

        result.append(char)
        i += 1

    return "".join(result)


def loads_jsonc(content: str) -> Any:
    """Parse JSON, falling back to JSONC when plain parsing fails.

    Raises:
        json.JSONDecodeError: If the content is not valid JSON or JSONC
    """
    try:
        return json.loads(content)
    except json.JSONDecodeError:
        stripped = _strip_trailing_commas(strip_jsonc_comments(content))
        return json.loads(stripped)


def load_jsonc_file(path: Path) -> Any:
    """Read and parse a JSON or JSONC file."""
    with open(path, encoding="utf-8") as f:
        return loads_jsonc(f.read())
