"""Read-only access to the persisted track ban list."""

from __future__ import annotations

import json
import os
from collections.abc import Iterable
from pathlib import Path

from tunequeue.logging import get_logger

logger = get_logger(__name__)

__all__ = ["JsonBlacklistStore", "StaticBlacklist", "normalise_entries"]


def normalise_entries(values: Iterable[object]) -> list[str]:
    entries: list[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        text = value.strip().lower()
        if text:
            entries.append(text)
    return entries


class JsonBlacklistStore:
    """Ban list persisted as a JSON array of strings.

    The file is owned by whatever manages the list and is re-read on every
    :meth:`load`, so edits show up without a restart.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[str]:
        try:
            contents = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            logger.warning("Unable to read blacklist %s: %s", self._path, exc)
            return []
        try:
            payload = json.loads(contents)
        except json.JSONDecodeError as exc:
            logger.error("Blacklist %s is not valid JSON: %s", self._path, exc)
            return []
        if not isinstance(payload, list):
            logger.error("Blacklist %s must contain a JSON array", self._path)
            return []
        return normalise_entries(payload)


class StaticBlacklist:
    """In-memory ban list, handy for embedding and tests."""

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._entries = tuple(normalise_entries(entries))

    def load(self) -> list[str]:
        return list(self._entries)
