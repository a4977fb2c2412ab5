"""Exception taxonomy shared by backends, runtime, and CLI."""

from __future__ import annotations


class BeadboardError(Exception):
    """Base class for all beadboard failures."""


class StartupError(BeadboardError):
    """Fatal setup failure raised before the interactive loop starts."""


class BackendError(BeadboardError):
    """Issue load failure; callers keep the previous snapshot."""


class InputError(BeadboardError):
    """Malformed terminal input that the loop drops."""


def describe_error(exc: BaseException) -> str:
    """Join ``exc`` and its ``__cause__`` chain into one readable line."""
    parts: list[str] = []
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        text = str(current).strip() or type(current).__name__
        if text not in parts:
            parts.append(text)
        current = current.__cause__
    return ": ".join(parts)
