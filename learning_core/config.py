from __future__ import annotations
import os, random


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


ATTEMPT_TICK_SECONDS: float = 1.0

UPLOAD_TICK_SECONDS: float = 0.2
PROCESSING_DELAY_SECONDS: float = 2.0
PROGRESS_STEP_MAX: float = 10.0
QUESTIONS_GENERATED_MIN: int = 5
QUESTIONS_GENERATED_MAX: int = 20  # exclusive

DEFAULT_TIME_LIMIT_MINUTES: int = 20
GENERATION_TOPICS: tuple[str, ...] = (
    "Deep Learning",
    "Natural Language Processing",
    "Computer Vision",
    "Reinforcement Learning",
)

ALLOWED_MIME_TYPES: tuple[str, ...] = (
    "application/pdf",
    "text/plain",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)

NOTIFICATION_BUFFER: int = 50
AUDIT_EXPORT_ENABLED: bool = True

DEBUG_SEED: int | None = None

# // env overrides for demos and tests; defaults mirror the web client timings.
ATTEMPT_TICK_SECONDS = _env_float("ATTEMPT_TICK_SECONDS", ATTEMPT_TICK_SECONDS)
UPLOAD_TICK_SECONDS = _env_float("UPLOAD_TICK_SECONDS", UPLOAD_TICK_SECONDS)
PROCESSING_DELAY_SECONDS = _env_float("PROCESSING_DELAY_SECONDS", PROCESSING_DELAY_SECONDS)
DEFAULT_TIME_LIMIT_MINUTES = _env_int("DEFAULT_TIME_LIMIT_MINUTES", DEFAULT_TIME_LIMIT_MINUTES)
NOTIFICATION_BUFFER = _env_int("NOTIFICATION_BUFFER", NOTIFICATION_BUFFER)
AUDIT_EXPORT_ENABLED = _env_bool("AUDIT_EXPORT_ENABLED", AUDIT_EXPORT_ENABLED)
_seed_raw = os.getenv("DEBUG_SEED")
DEBUG_SEED = _env_int("DEBUG_SEED", 0) if _seed_raw else None


def make_rng(seed: int | None = None) -> random.Random:
    """RNG for simulated progress and topic picks; seeded when DEBUG_SEED is set."""

    s = DEBUG_SEED if seed is None else seed
    return random.Random(s)
