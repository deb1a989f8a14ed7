from __future__ import annotations

_SIZES = ("Bytes", "KB", "MB", "GB")


def format_time(seconds: int) -> str:
    """Countdown label, e.g. 125 -> '2:05'."""

    s = max(0, int(seconds))
    return f"{s // 60}:{s % 60:02d}"


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    i = 0
    while value >= 1024 and i < len(_SIZES) - 1:
        value /= 1024
        i += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZES[i]}"
