"""
Runtime settings for the CLI and the HTTP service.

Values come from the environment; a ``.env`` file in the working directory
or any parent is loaded first, without overriding variables already set.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

_TRUE = {'1', 'true', 'yes', 'on'}
_FALSE = {'0', 'false', 'no', 'off'}


def load_env(start: Optional[Path] = None) -> Optional[Path]:
    """Load the nearest .env file. Returns its path, or None if none was found."""
    here = Path(start) if start else Path.cwd()
    for candidate in [here / ".env", *(parent / ".env" for parent in here.parents)]:
        if candidate.exists():
            load_dotenv(candidate)
            return candidate
    return None


def _flag(environ: Mapping[str, str], name: str, default: bool) -> bool:
    value = environ.get(name, '').strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return default


def _int(environ: Mapping[str, str], name: str, default: int) -> int:
    try:
        return int(environ.get(name, default))
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Settings:
    preserve_edge_styles: bool = True
    fenced_output: bool = False
    host: str = "127.0.0.1"
    port: int = 8765
    max_source_chars: int = 200_000

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            preserve_edge_styles=_flag(env, "FLOWCHART_PRESERVE_EDGE_STYLES", True),
            fenced_output=_flag(env, "FLOWCHART_FENCED_OUTPUT", False),
            host=env.get("FLOWCHART_HOST") or "127.0.0.1",
            port=_int(env, "FLOWCHART_PORT", 8765),
            max_source_chars=_int(env, "FLOWCHART_MAX_SOURCE_CHARS", 200_000),
        )
