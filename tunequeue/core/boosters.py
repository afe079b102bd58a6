"""Keyword driven query boosters that bias catalog search toward a mood."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from .types import BoostResult


@dataclass(slots=True, frozen=True)
class BoosterRule:
    pattern: re.Pattern[str]
    suffix: str

    @property
    def label(self) -> str:
        return self.suffix.strip()


def _rule(pattern: str, suffix: str) -> BoosterRule:
    return BoosterRule(pattern=re.compile(pattern), suffix=suffix)


# Order matters: suffixes are appended in list order, not match order.
DEFAULT_BOOSTERS: tuple[BoosterRule, ...] = (
    _rule(r"(xmas|christmas|jul)", " christmas holiday"),
    _rule(r"(party|fest|dansband)", " party upbeat"),
    _rule(r"(chill|relax|lugn|mysig|cozy)", " chill mellow"),
    _rule(r"(workout|gym|träning)", " workout energetic"),
    _rule(r"(sommar|summer|beach)", " summer beach hits"),
    _rule(r"(80s|80-tal|eighties)", " 80s classic hits"),
    _rule(r"(90s|90-tal|nineties)", " 90s classic hits"),
    _rule(r"(rock|metal)", " rock classic"),
    _rule(r"(pop|hits)", " pop hits"),
    _rule(r"(disco|funk)", " disco dance funk"),
    _rule(r"(ballad|kärleks|love|romantic)", " ballad love romantic"),
    _rule(r"(hip.?hop|rap|hiphop)", " hip hop rap hits"),
    _rule(r"(country|nashville)", " country hits"),
    _rule(r"(jazz|blues)", " jazz blues classic"),
    _rule(r"(klassisk|classical|opera)", " classical orchestra"),
    _rule(r"(reggae|ska|caribbean)", " reggae caribbean"),
    _rule(r"(indie|alternative)", " indie alternative"),
    _rule(r"(edm|electro|house|techno)", " electronic dance"),
    _rule(r"(latin|salsa|bachata|reggaeton)", " latin dance"),
    _rule(r"(svensk|swedish)", " swedish svenska"),
    _rule(r"(lounge|elevator|hiss)", " lounge smooth jazz"),
    _rule(r"(club|dance|dansmusik)", " club dance hits"),
    _rule(r"(season|säsong|winter|vinter|autumn|höst)", " cozy winter"),
    _rule(r"(barnlåt|kids|children|barn)", " children kids"),
)


class QueryBooster:
    """Append mood/genre vocabulary to a query when its keywords match."""

    def __init__(self, rules: Sequence[BoosterRule] = DEFAULT_BOOSTERS) -> None:
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[BoosterRule, ...]:
        return self._rules

    def boost(self, query: str) -> BoostResult:
        text = query or ""
        lowered = text.lower()
        boosted = text
        applied: list[str] = []
        for rule in self._rules:
            if rule.pattern.search(lowered):
                boosted += rule.suffix
                applied.append(rule.label)
        return BoostResult(query=boosted, applied_boosters=tuple(applied))

    def describe(self) -> list[tuple[str, str]]:
        return [(rule.pattern.pattern, rule.label) for rule in self._rules]


_DEFAULT_BOOSTER = QueryBooster()


def apply_boosters(query: str) -> BoostResult:
    return _DEFAULT_BOOSTER.boost(query)


def list_boosters() -> list[tuple[str, str]]:
    """Return ``(pattern, suffix)`` pairs for diagnostics."""

    return _DEFAULT_BOOSTER.describe()


__all__ = [
    "DEFAULT_BOOSTERS",
    "BoosterRule",
    "QueryBooster",
    "apply_boosters",
    "list_boosters",
]
