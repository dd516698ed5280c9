from __future__ import annotations

from dataclasses import dataclass

from panda3d.core import LVector3f


@dataclass(frozen=True)
class AABB:
    minimum: LVector3f
    maximum: LVector3f

    @property
    def center(self) -> LVector3f:
        return (LVector3f(self.minimum) + LVector3f(self.maximum)) * 0.5

    @property
    def half_extents(self) -> LVector3f:
        return (LVector3f(self.maximum) - LVector3f(self.minimum)) * 0.5
