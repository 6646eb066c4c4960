"""Transient scanline progress line.

Writes ``Scanlines remaining: N`` to stderr, rewriting the same terminal
line with a carriage return, and ends with ``Done``. Kept apart from
logging so the line can be overwritten in place.
"""

from __future__ import annotations

import sys
from typing import TextIO


class ScanlineProgress:
    """Reports rows left to render on a text stream.

    Instances are callable with (remaining, total), so they can be passed
    directly as a Renderer progress callback.

    Example:
        >>> progress = ScanlineProgress()
        >>> renderer.render(world, 100, callback=progress)
        >>> progress.finish()
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stderr

    def update(self, remaining: int) -> None:
        """Rewrite the progress line with the number of rows remaining."""
        self._stream.write(f"\rScanlines remaining: {remaining}     ")
        self._stream.flush()

    def finish(self) -> None:
        """Terminate the progress line."""
        self._stream.write("\nDone\n")
        self._stream.flush()

    def __call__(self, remaining: int, total: int) -> None:
        self.update(remaining)
