"""Permission-bit helpers."""

from __future__ import annotations


def mode_to_int(value: str | int | None) -> int | None:
    """Convert an octal mode string (``"0644"``) or int into permission bits.

    ``None`` and blank strings return ``None`` so callers can inherit defaults.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid mode: {value!r}")
    if isinstance(value, int):
        mode = value
    else:
        text = value.strip()
        if not text:
            return None
        if text.lower().startswith("0o"):
            text = text[2:]
        try:
            mode = int(text, 8)
        except ValueError as exc:
            raise ValueError(f"Invalid octal mode: {value!r}") from exc
    if mode < 0 or mode > 0o7777:
        raise ValueError(f"Mode out of range: {value!r}")
    return mode


def format_mode(mode: int | None) -> str:
    return "-" if mode is None else f"{mode:04o}"
