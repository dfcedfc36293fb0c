"""Span helper for timing work inside an interview session."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator


@contextmanager
def span(target: Any, name: str) -> Iterator[None]:
    """Append ``{"span", "ms", "ok"}`` to ``target.events`` when the block exits."""
    start = time.perf_counter()
    ok = False
    try:
        yield
        ok = True
    finally:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        target.events.append({"span": name, "ms": elapsed_ms, "ok": ok})


__all__ = ["span"]
