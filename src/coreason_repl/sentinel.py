# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_repl

"""End-of-block markers for REPL output streams.

A sentinel is written to stdout after every code block. It combines a random
float, a millisecond timestamp and the code length. This makes a collision with
real program output, or between two jobs of one executor, negligible; it is
not a cryptographic guarantee.
"""

import random
import time

SENTINEL_PREFIX = "SIGIL_BLOCK_DONE"


def make_sentinel(code: str) -> str:
    """Builds a fresh sentinel for one block of ``code``."""
    return f"{SENTINEL_PREFIX}{random.random()}_{int(time.time() * 1000)}_{len(code)}"


class SentinelScanner:
    """Splits a stdout stream into block output and the trailing sentinel.

    The match is a suffix check. A chunk whose tail could be the start of the
    sentinel keeps that tail back until the next chunk decides it, so a
    sentinel split across two reads is still found, even when the split falls
    after its first character. The price is that output ending in such a
    prefix (a prompt ending in "S", say) reaches the outputter only when the
    next chunk arrives or the stream closes.
    """

    def __init__(self, sentinel: str):
        self.sentinel = sentinel
        self._held = ""
        self.found = False

    def feed(self, chunk: str) -> tuple[str, bool]:
        """Consumes one chunk.

        Returns:
            tuple[str, bool]: The text to forward and whether the sentinel ended
            this chunk.
        """
        if self.found:
            return "", True

        text = self._held + chunk
        self._held = ""

        if text.endswith(self.sentinel):
            self.found = True
            return text[: -len(self.sentinel)], True

        overlap = self._partial_overlap(text)
        if overlap:
            self._held = text[-overlap:]
            text = text[:-overlap]
        return text, False

    def flush(self) -> str:
        """Releases any held-back text, e.g. when the stream ends."""
        held, self._held = self._held, ""
        return held

    def _partial_overlap(self, text: str) -> int:
        # Longest proper prefix of the sentinel that is a suffix of text
        for size in range(min(len(text), len(self.sentinel) - 1), 0, -1):
            if text.endswith(self.sentinel[:size]):
                return size
        return 0
