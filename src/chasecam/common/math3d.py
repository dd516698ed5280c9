from __future__ import annotations

import math

from panda3d.core import LQuaternionf, LVecBase3f, LVector3f


def clamp(value: float, lo: float, hi: float) -> float:
    return max(float(lo), min(float(hi), float(value)))


def lerp(a: float, b: float, t: float) -> float:
    """Clamped linear interpolation."""
    tt = clamp(t, 0.0, 1.0)
    return float(a) + (float(b) - float(a)) * tt


def lerp_to(current: float, target: float, frac: float) -> float:
    return lerp(current, target, frac)


def normalize_angle_deg(angle: float) -> float:
    """Wrap to (-180, 180]."""

    a = math.fmod(float(angle), 360.0)
    if a > 180.0:
        a -= 360.0
    elif a <= -180.0:
        a += 360.0
    return a


def safe_dt(dt: float) -> float:
    d = float(dt)
    if not math.isfinite(d) or d <= 0.0:
        return 0.0
    return d


def quat_from_hpr(h: float, p: float, r: float = 0.0) -> LQuaternionf:
    q = LQuaternionf()
    q.setHpr(LVecBase3f(float(h), float(p), float(r)))
    return q


def quat_from_axis_angle(angle_deg: float, axis: LVector3f) -> LQuaternionf:
    q = LQuaternionf()
    q.setFromAxisAngle(float(angle_deg), LVector3f(axis))
    return q


def quat_yaw(q: LQuaternionf) -> float:
    return normalize_angle_deg(float(q.getHpr()[0]))


def quat_pitch(q: LQuaternionf) -> float:
    return normalize_angle_deg(float(q.getHpr()[1]))


def axis_yaw(q: LQuaternionf) -> float:
    """Heading of a rotation about +Z only."""

    return normalize_angle_deg(math.degrees(2.0 * math.atan2(float(q.getK()), float(q.getR()))))


def axis_pitch(q: LQuaternionf) -> float:
    """Pitch of a rotation about +X only, continuous through +-90 degrees."""

    return normalize_angle_deg(math.degrees(2.0 * math.atan2(float(q.getI()), float(q.getR()))))


def quat_dot(a: LQuaternionf, b: LQuaternionf) -> float:
    return (
        float(a.getR()) * float(b.getR())
        + float(a.getI()) * float(b.getI())
        + float(a.getJ()) * float(b.getJ())
        + float(a.getK()) * float(b.getK())
    )


def quat_angle_deg(a: LQuaternionf, b: LQuaternionf) -> float:
    """Smallest rotation angle between two orientations."""

    # Chord form stays accurate for tiny angles where acos(dot) does not.
    s = 1.0 if quat_dot(a, b) >= 0.0 else -1.0
    chord = math.sqrt(
        (float(a.getR()) - s * float(b.getR())) ** 2
        + (float(a.getI()) - s * float(b.getI())) ** 2
        + (float(a.getJ()) - s * float(b.getJ())) ** 2
        + (float(a.getK()) - s * float(b.getK())) ** 2
    )
    return math.degrees(4.0 * math.asin(min(1.0, chord * 0.5)))


def slerp(a: LQuaternionf, b: LQuaternionf, t: float) -> LQuaternionf:
    """Shortest-path spherical interpolation, `t` clamped to [0, 1]."""

    tt = clamp(t, 0.0, 1.0)
    if tt <= 0.0:
        return LQuaternionf(a)
    if tt >= 1.0:
        return LQuaternionf(b)

    ar, ai, aj, ak = float(a.getR()), float(a.getI()), float(a.getJ()), float(a.getK())
    br, bi, bj, bk = float(b.getR()), float(b.getI()), float(b.getJ()), float(b.getK())
    dot = ar * br + ai * bi + aj * bj + ak * bk
    if dot < 0.0:
        br, bi, bj, bk = -br, -bi, -bj, -bk
        dot = -dot

    if dot > 0.9995:
        # Nearly parallel: nlerp is stable and indistinguishable here.
        wa = 1.0 - tt
        wb = tt
    else:
        theta = math.acos(dot)
        sin_theta = math.sin(theta)
        wa = math.sin((1.0 - tt) * theta) / sin_theta
        wb = math.sin(tt * theta) / sin_theta

    out = LQuaternionf(wa * ar + wb * br, wa * ai + wb * bi, wa * aj + wb * bj, wa * ak + wb * bk)
    out.normalize()
    return out


def rotate_vec(q: LQuaternionf, v: LVector3f) -> LVector3f:
    out = q.xform(LVector3f(v))
    return LVector3f(float(out[0]), float(out[1]), float(out[2]))
