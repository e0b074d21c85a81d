"""Project metadata shared by the runtime and the command-line tool."""

from __future__ import annotations

from typing import Mapping

PROJECT_METADATA: Mapping[str, str] = {
    "name": "dynhist",
    "version": "1.0.0",
    "summary": "Dynamic bounded-memory streaming histogram with percentile estimates",
}

__version__ = PROJECT_METADATA["version"]
