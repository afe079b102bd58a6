"""Split a requested batch between main and theme content and weave them."""

from __future__ import annotations

import math
from collections.abc import Sequence

from .errors import InvalidInputError
from .types import ThemeSplit, Track


def split_theme(
    total: int, percentage: int | float, *, theme: str | None = None
) -> ThemeSplit:
    """Return the main/theme split for ``total`` tracks.

    Half-way cases round toward the theme count. A blank ``theme`` or a zero
    percentage disables the theme share entirely.
    """

    if total < 0:
        raise InvalidInputError("Requested track count must not be negative.")
    if not 0 <= percentage <= 100:
        raise InvalidInputError("Theme percentage must be between 0 and 100.")
    if (theme is not None and not theme.strip()) or percentage == 0:
        return ThemeSplit(main_count=total, theme_count=0)
    theme_count = min(total, math.floor(total * percentage / 100 + 0.5))
    return ThemeSplit(main_count=total - theme_count, theme_count=theme_count)


def mix_tracks(
    main_tracks: Sequence[Track],
    theme_tracks: Sequence[Track],
    requested_total: int,
) -> list[Track]:
    """Interleave ``theme_tracks`` evenly through ``main_tracks``.

    ``interval`` main tracks are emitted before each theme track until
    ``requested_total`` items exist or both inputs run dry.
    """

    if requested_total < 0:
        raise InvalidInputError("Requested track count must not be negative.")
    if not theme_tracks:
        return list(main_tracks[:requested_total])

    interval = max(1, len(main_tracks) // (len(theme_tracks) + 1))
    mixed: list[Track] = []
    main_index = 0
    theme_index = 0
    while len(mixed) < requested_total and (
        main_index < len(main_tracks) or theme_index < len(theme_tracks)
    ):
        for _ in range(interval):
            if main_index >= len(main_tracks) or len(mixed) >= requested_total:
                break
            mixed.append(main_tracks[main_index])
            main_index += 1
        if theme_index < len(theme_tracks) and len(mixed) < requested_total:
            mixed.append(theme_tracks[theme_index])
            theme_index += 1
    return mixed


__all__ = ["mix_tracks", "split_theme"]
