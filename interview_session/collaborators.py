"""Narrow interfaces to the speech, rendering and camera collaborators.

The session never recognises speech or synthesises audio itself; it reacts
to callbacks from these objects and tells them when to start and stop.
"""
from __future__ import annotations

from typing import Callable, Optional, Protocol

RenderDone = Callable[[Optional[Exception]], None]


class InputCapture(Protocol):
    """Speech-to-text source. Results come back through the session's
    ``on_transcript``, ``on_capture_ended`` and ``on_capture_error``."""

    def start(self) -> None: ...

    def stop(self) -> None: ...


class OutputRenderer(Protocol):  # Text-to-speech or on-screen rendering
    def render(self, text: str, language_code: str, on_done: RenderDone) -> None: ...


class SnapshotProvider(Protocol):  # Camera stills as data:image URIs
    def capture(self) -> Optional[str]: ...


__all__ = ["InputCapture", "OutputRenderer", "RenderDone", "SnapshotProvider"]
