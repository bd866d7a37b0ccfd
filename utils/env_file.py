from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator

_QUOTES = {"'", '"'}


def _clean_value(raw: str) -> str:
    value = raw.strip()
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return value[1:-1]
    # Unquoted values may carry a trailing " # comment".
    comment_at = value.find(" #")
    if comment_at != -1:
        value = value[:comment_at].rstrip()
    return value


def parse_env_lines(lines: Iterable[str]) -> Iterator[tuple[str, str]]:
    """
    Yield KEY, VALUE pairs from .env-style lines.

    Blank lines, ``#`` comments and lines without ``=`` are skipped; an ``export `` prefix is allowed.
    """
    for raw_line in lines:
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        yield key, _clean_value(value)


def load_env_file(path: str | Path, *, override: bool = False) -> dict[str, str]:
    """
    Load a .env file into os.environ (used by scripts run outside the dashboard process).

    Existing variables win unless ``override`` is set. Returns the variables that were applied.
    """
    env_path = Path(path)
    if not env_path.exists():
        return {}

    loaded: dict[str, str] = {}
    for key, value in parse_env_lines(env_path.read_text(encoding="utf-8").splitlines()):
        if override or key not in os.environ:
            os.environ[key] = value
            loaded[key] = value
    return loaded
