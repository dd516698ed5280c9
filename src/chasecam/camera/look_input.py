from __future__ import annotations


class LookInputBuffer:
    """
    Accumulates analog look deltas (degrees) between camera updates.

    The input layer may push several events per frame; the controller drains
    the buffer once at the start of each update.
    """

    def __init__(self, *, yaw_scale: float = 1.0, pitch_scale: float = 1.0) -> None:
        self.yaw_scale = float(yaw_scale)
        self.pitch_scale = float(pitch_scale)
        self._yaw_accum = 0.0
        self._pitch_accum = 0.0

    def add(self, yaw: float, pitch: float) -> None:
        self._yaw_accum += float(yaw)
        self._pitch_accum += float(pitch)

    def pending(self) -> bool:
        return (abs(self._yaw_accum) + abs(self._pitch_accum)) > 0.0

    def clear(self) -> None:
        self._yaw_accum = 0.0
        self._pitch_accum = 0.0

    def consume(self) -> tuple[float, float]:
        dy = self._yaw_accum * self.yaw_scale
        dp = self._pitch_accum * self.pitch_scale
        self.clear()
        return (dy, dp)
