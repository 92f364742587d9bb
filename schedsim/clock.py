from __future__ import annotations


class Clock:
    """
    Integer tick counter owned by a single engine run.

    The engine is the only caller of ``advance`` and ``reset``; everything else
    reads ``value``.
    """

    def __init__(self) -> None:
        self._tick = 0

    def advance(self) -> None:
        self._tick += 1

    def value(self) -> int:
        return self._tick

    def reset(self) -> None:
        self._tick = 0

    def __repr__(self) -> str:
        return f"Clock(tick={self._tick})"
