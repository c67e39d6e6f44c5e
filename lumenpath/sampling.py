"""
Scoped random number sources.

Every stochastic decision in the renderer (lens samples, scatter directions,
free-flight distances, mixture coin flips) draws from the generator returned
by `current_rng()`. Rendering tasks install their own generator with
`rng_scope`, so parallel tasks never share random state and a seeded render
is reproducible.
"""

from __future__ import annotations
import contextlib
import contextvars
from typing import Iterator, Optional, Union

import numpy as np

SeedLike = Union[None, int, np.random.SeedSequence, np.random.Generator]

_current_rng: contextvars.ContextVar[Optional[np.random.Generator]] = contextvars.ContextVar(
    'lumenpath_rng', default=None
)


def make_rng(seed: SeedLike = None) -> np.random.Generator:
    """Build a generator from a seed, seed sequence or existing generator."""
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def current_rng() -> np.random.Generator:
    """Return the generator installed for the current context.

    A fresh, unseeded generator is created on first use in a context
    (each thread starts with its own context).
    """
    rng = _current_rng.get()
    if rng is None:
        rng = np.random.default_rng()
        _current_rng.set(rng)
    return rng


@contextlib.contextmanager
def rng_scope(seed: SeedLike = None) -> Iterator[np.random.Generator]:
    """Install a generator for the duration of a `with` block.

    Args:
        seed: Seed, SeedSequence or Generator to use inside the block

    Yields:
        The installed generator
    """
    rng = make_rng(seed)
    token = _current_rng.set(rng)
    try:
        yield rng
    finally:
        _current_rng.reset(token)


def random_double(min_val: float = 0.0, max_val: float = 1.0) -> float:
    """Uniform float in [min_val, max_val)."""
    return min_val + (max_val - min_val) * float(current_rng().random())


def random_int(low: int, high: int) -> int:
    """Uniform integer in [low, high]."""
    return int(current_rng().integers(low, high + 1))
