"""Application configuration utilities for tunequeue."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
import os
from pathlib import Path
from typing import Any

from tunequeue.logging import get_logger

logger = get_logger(__name__)

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_SPOTIFY_MARKET = "US"
DEFAULT_CATALOG_TIMEOUT_MS = 10_000
DEFAULT_CATALOG_RETRY_MAX = 1
DEFAULT_CATALOG_BACKOFF_BASE_MS = 250
DEFAULT_CATALOG_JITTER_PCT = 20.0
DEFAULT_SEARCH_RESULT_CAP = 50
MAX_SEARCH_RESULT_CAP = 50
DEFAULT_ADD_CANDIDATE_LIMIT = 3
DEFAULT_ALBUM_SEARCH_LIMIT = 3
DEFAULT_PLAYLIST_SEARCH_LIMIT = 5
DEFAULT_BATCH_CONCURRENCY = 8
DEFAULT_REGION_ERROR_CODES: tuple[str, ...] = ("800",)
DEFAULT_BLACKLIST_PATH = "config/blacklist.json"


_RUNTIME_ENV_CACHE: dict[str, str] | None = None


def _load_env_file(path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    try:
        contents = path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning("Unable to read env file %s: %s", path, exc)
        return values
    for raw_line in contents.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
            value = value[1:-1]
        values[key] = value
    return values


def load_runtime_env(
    *,
    env_file: str | os.PathLike[str] | None = None,
    base_env: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Load runtime environment values applying .env before explicit environment."""

    env: dict[str, str] = {}
    source = dict(base_env or os.environ)

    path = Path(env_file) if env_file is not None else Path(".env")
    if path.exists() and path.is_file():
        env.update(_load_env_file(path))

    env.update({key: str(value) for key, value in source.items() if value is not None})
    return env


def get_runtime_env() -> Mapping[str, str]:
    """Return the cached runtime environment mapping."""

    global _RUNTIME_ENV_CACHE
    if _RUNTIME_ENV_CACHE is None:
        _RUNTIME_ENV_CACHE = load_runtime_env()
    return _RUNTIME_ENV_CACHE


def override_runtime_env(runtime_env: Mapping[str, str] | None) -> None:
    """Override the cached runtime environment (primarily for testing)."""

    global _RUNTIME_ENV_CACHE
    if runtime_env is None:
        _RUNTIME_ENV_CACHE = None
    else:
        _RUNTIME_ENV_CACHE = dict(runtime_env)


def get_env(name: str, default: str | None = None) -> str | None:
    """Return an environment variable honoring ENV > .env > defaults."""

    env = get_runtime_env()
    return env.get(name, default)


def _env_value(env: Mapping[str, Any], key: str) -> str | None:
    value = env.get(key)
    if value is None:
        return None
    return str(value)


def _as_bool(value: str | None, *, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _coerce_int(value: Any, *, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _bounded_int(
    value: Any,
    *,
    default: int,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int:
    resolved = _coerce_int(value, default=default)
    if minimum is not None:
        resolved = max(minimum, resolved)
    if maximum is not None:
        resolved = min(maximum, resolved)
    return resolved


def _parse_list(value: str | None) -> list[str]:
    if value is None:
        return []
    candidates = value.replace("\n", ",").split(",")
    return [item.strip() for item in candidates if item.strip()]


def _parse_jitter_value(value: Any, *, default_pct: float) -> float:
    """Accept jitter as a fraction (``0.2``) or a percentage (``20``)."""

    if value is None:
        return default_pct
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default_pct
    if parsed < 0:
        return 0.0
    if parsed <= 1:
        return parsed * 100
    return parsed


def default_year_tokens(today: date | None = None) -> tuple[str, ...]:
    current = (today or date.today()).year
    return (str(current), str(current - 1))


@dataclass(slots=True, frozen=True)
class LoggingConfig:
    level: str
    file: str | None


@dataclass(slots=True, frozen=True)
class SpotifyConfig:
    client_id: str | None
    client_secret: str | None
    market: str


@dataclass(slots=True, frozen=True)
class ExternalCallPolicy:
    timeout_ms: int
    retry_max: int
    backoff_base_ms: int
    jitter_pct: float

    @classmethod
    def from_env(cls, env: Mapping[str, Any]) -> ExternalCallPolicy:
        timeout_ms = _bounded_int(
            env.get("CATALOG_TIMEOUT_MS"),
            default=DEFAULT_CATALOG_TIMEOUT_MS,
            minimum=100,
        )
        retry_max = _bounded_int(
            env.get("CATALOG_RETRY_MAX"),
            default=DEFAULT_CATALOG_RETRY_MAX,
            minimum=0,
        )
        backoff_base = _bounded_int(
            env.get("CATALOG_BACKOFF_BASE_MS"),
            default=DEFAULT_CATALOG_BACKOFF_BASE_MS,
            minimum=1,
        )
        jitter_pct = _parse_jitter_value(
            env.get("CATALOG_JITTER_PCT"),
            default_pct=DEFAULT_CATALOG_JITTER_PCT,
        )
        return cls(
            timeout_ms=timeout_ms,
            retry_max=retry_max,
            backoff_base_ms=backoff_base,
            jitter_pct=jitter_pct,
        )


@dataclass(slots=True, frozen=True)
class PipelineConfig:
    default_theme: str = ""
    theme_percentage: int = 0
    search_result_cap: int = DEFAULT_SEARCH_RESULT_CAP
    single_add_candidates: int = DEFAULT_ADD_CANDIDATE_LIMIT
    album_search_limit: int = DEFAULT_ALBUM_SEARCH_LIMIT
    playlist_search_limit: int = DEFAULT_PLAYLIST_SEARCH_LIMIT
    year_tokens: tuple[str, ...] = ()
    batch_concurrency: int = DEFAULT_BATCH_CONCURRENCY
    region_error_codes: tuple[str, ...] = DEFAULT_REGION_ERROR_CODES
    autoplay: bool = True


@dataclass(slots=True, frozen=True)
class BlacklistConfig:
    path: str


@dataclass(slots=True, frozen=True)
class AppConfig:
    logging: LoggingConfig
    spotify: SpotifyConfig
    catalog_policy: ExternalCallPolicy
    pipeline: PipelineConfig
    blacklist: BlacklistConfig


def load_pipeline_config(env: Mapping[str, Any] | None = None) -> PipelineConfig:
    """Return the values that steer search, theme mixing and queue commits."""

    env = env if env is not None else get_runtime_env()
    default_theme = (_env_value(env, "DEFAULT_THEME") or "").strip()
    theme_percentage = _bounded_int(
        _env_value(env, "THEME_PERCENTAGE"), default=0, minimum=0, maximum=100
    )
    year_tokens = tuple(_parse_list(_env_value(env, "SEARCH_YEAR_TOKENS")))
    region_codes = tuple(_parse_list(_env_value(env, "DEVICE_REGION_ERROR_CODES")))
    return PipelineConfig(
        default_theme=default_theme,
        theme_percentage=theme_percentage,
        search_result_cap=_bounded_int(
            _env_value(env, "SEARCH_RESULT_CAP"),
            default=DEFAULT_SEARCH_RESULT_CAP,
            minimum=1,
            maximum=MAX_SEARCH_RESULT_CAP,
        ),
        single_add_candidates=_bounded_int(
            _env_value(env, "ADD_CANDIDATE_LIMIT"),
            default=DEFAULT_ADD_CANDIDATE_LIMIT,
            minimum=1,
            maximum=MAX_SEARCH_RESULT_CAP,
        ),
        album_search_limit=_bounded_int(
            _env_value(env, "ALBUM_SEARCH_LIMIT"),
            default=DEFAULT_ALBUM_SEARCH_LIMIT,
            minimum=1,
            maximum=MAX_SEARCH_RESULT_CAP,
        ),
        playlist_search_limit=_bounded_int(
            _env_value(env, "PLAYLIST_SEARCH_LIMIT"),
            default=DEFAULT_PLAYLIST_SEARCH_LIMIT,
            minimum=1,
            maximum=MAX_SEARCH_RESULT_CAP,
        ),
        year_tokens=year_tokens or default_year_tokens(),
        batch_concurrency=_bounded_int(
            _env_value(env, "QUEUE_BATCH_CONCURRENCY"),
            default=DEFAULT_BATCH_CONCURRENCY,
            minimum=1,
        ),
        region_error_codes=region_codes or DEFAULT_REGION_ERROR_CODES,
        autoplay=_as_bool(_env_value(env, "QUEUE_AUTOPLAY"), default=True),
    )


def load_config(runtime_env: Mapping[str, Any] | None = None) -> AppConfig:
    env = runtime_env if runtime_env is not None else get_runtime_env()
    logging_config = LoggingConfig(
        level=(_env_value(env, "TUNEQUEUE_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        file=_env_value(env, "TUNEQUEUE_LOG_FILE") or None,
    )
    spotify = SpotifyConfig(
        client_id=_env_value(env, "SPOTIFY_CLIENT_ID") or None,
        client_secret=_env_value(env, "SPOTIFY_CLIENT_SECRET") or None,
        market=(_env_value(env, "SPOTIFY_MARKET") or DEFAULT_SPOTIFY_MARKET).upper(),
    )
    blacklist = BlacklistConfig(
        path=_env_value(env, "TRACK_BLACKLIST_PATH") or DEFAULT_BLACKLIST_PATH
    )
    return AppConfig(
        logging=logging_config,
        spotify=spotify,
        catalog_policy=ExternalCallPolicy.from_env(env),
        pipeline=load_pipeline_config(env),
        blacklist=blacklist,
    )
