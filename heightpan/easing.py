"""Easing functions and time-bounded tweens.

An easing function maps normalized time ``t`` in ``[0, 1]`` to progress in
``[0, 1]`` with ``f(0) == 0`` and ``f(1) == 1``.  A :class:`Tween` combines
one with a start value, a target and a duration, and is advanced by whatever
clock the caller owns.
"""

import math

from .viewport import Point


def linear(t):
    return t


def ease_out_cubic(t):
    return 1.0 - (1.0 - t) ** 3


def ease_in_out_sine(t):
    return -(math.cos(math.pi * t) - 1.0) / 2.0


def damped_spring(stiffness=12.0, damping=1.0):
    """Return an easing that follows a damped spring released at t=0.

    ``damping`` is the damping ratio: 1.0 is critically damped, smaller values
    overshoot.  The curve is rescaled so it lands exactly on 1 at t=1.
    """
    if stiffness <= 0:
        raise ValueError("stiffness must be positive")
    if damping <= 0:
        raise ValueError("damping must be positive")

    omega = stiffness

    def raw(t):
        if damping < 1.0:
            wd = omega * math.sqrt(1.0 - damping ** 2)
            decay = math.exp(-damping * omega * t)
            return 1.0 - decay * (math.cos(wd * t) + damping * omega / wd * math.sin(wd * t))
        if damping == 1.0:
            return 1.0 - math.exp(-omega * t) * (1.0 + omega * t)
        root = math.sqrt(damping ** 2 - 1.0)
        r1 = -omega * (damping - root)
        r2 = -omega * (damping + root)
        return 1.0 - (r2 * math.exp(r1 * t) - r1 * math.exp(r2 * t)) / (r2 - r1)

    end = raw(1.0)

    def spring(t):
        if t >= 1.0:
            return 1.0
        return raw(t) / end

    spring.__name__ = 'damped_spring'
    return spring


EASINGS = {
    'linear': linear,
    'ease_out_cubic': ease_out_cubic,
    'ease_in_out_sine': ease_in_out_sine,
    'spring': damped_spring(),
}


def get_easing(easing):
    """Resolve an easing name or pass a callable through."""
    if callable(easing):
        return easing
    try:
        return EASINGS[easing]
    except KeyError:
        raise ValueError(
            f"Unknown easing {easing!r}; use one of {sorted(EASINGS)} or a callable"
        )


def lerp(start, target, t):
    """Linear interpolation between two scalars or two points."""
    if isinstance(start, tuple):
        return Point(*(s + (e - s) * t for s, e in zip(start, target)))
    return start + (target - start) * t


class Tween:
    """Interpolate from *start* to *target* over *duration* seconds.

    Parameters
    ----------
    start, target : Point
    start_time : float
        Clock reading when the tween began.
    duration : float
        Length in seconds.
    easing : str or callable
    """

    def __init__(self, start, target, start_time, duration, easing='ease_out_cubic'):
        if duration <= 0:
            raise ValueError(f"duration must be positive, got {duration!r}")
        self.start = Point(*start)
        self.target = Point(*target)
        self.start_time = start_time
        self.duration = duration
        self.easing = get_easing(easing)

    def progress(self, now):
        t = (now - self.start_time) / self.duration
        return max(0.0, min(1.0, t))

    def finished(self, now):
        return now - self.start_time >= self.duration

    def value_at(self, now):
        if self.finished(now):
            return self.target
        return lerp(self.start, self.target, self.easing(self.progress(now)))

    def __repr__(self):
        return (f"Tween({tuple(self.start)} -> {tuple(self.target)}, "
                f"{self.duration * 1000:.0f} ms)")
