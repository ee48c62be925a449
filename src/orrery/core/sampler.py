"""Seeded per-stream random number generation for Monte Carlo sampling.

Every pixel owns one independent generator stream, so the sequence of random
numbers a pixel consumes depends only on the seed and the pixel's stream
index, never on how Taichi schedules the parallel loop. Re-seeding with the
same value reproduces a render bit for bit.

Each stream is a 32-bit xorshift state stored in a Taichi field. States are
initialised by hashing (seed, stream index) with Thomas Wang's integer hash,
which decorrelates neighbouring streams.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.orrery.core.sampler import seed_streams, random_float
    >>> seed_streams(1234)
    >>> # Inside a Taichi kernel, for stream k:
    >>> # x = random_float(k)  # uniform in [0, 1)
"""

import taichi as ti

# One stream per pixel of the largest supported render target
MAX_STREAM_WIDTH = 2048
MAX_STREAM_HEIGHT = 2048
MAX_STREAMS = MAX_STREAM_WIDTH * MAX_STREAM_HEIGHT

# 2^-24, maps the top 24 bits of a state onto [0, 1)
_INV_2_24 = 1.0 / 16777216.0

_stream_states = ti.field(dtype=ti.u32, shape=MAX_STREAMS)
_current_seed = ti.field(dtype=ti.i32, shape=())


@ti.func
def _wang_hash(key: ti.u32) -> ti.u32:
    """Scramble a 32-bit integer (Thomas Wang's hash)."""
    h = key
    h = (h ^ ti.u32(61)) ^ (h >> ti.u32(16))
    h = h * ti.u32(9)
    h = h ^ (h >> ti.u32(4))
    h = h * ti.u32(0x27D4EB2D)
    h = h ^ (h >> ti.u32(15))
    return h


@ti.func
def _xorshift32(state: ti.u32) -> ti.u32:
    """Advance a xorshift32 state by one step."""
    x = state
    x = x ^ (x << ti.u32(13))
    x = x ^ (x >> ti.u32(17))
    x = x ^ (x << ti.u32(5))
    return x


@ti.kernel
def _seed_kernel(seed: ti.i32):
    for k in range(MAX_STREAMS):
        key = ti.cast(k, ti.u32) * ti.u32(1973) + ti.cast(seed, ti.u32) * ti.u32(9277)
        h = _wang_hash(key + ti.u32(26699))
        # xorshift has a fixed point at zero
        if h == ti.u32(0):
            h = ti.u32(1)
        _stream_states[k] = h


def seed_streams(seed: int) -> None:
    """Initialise every generator stream from a single seed.

    Args:
        seed: Any Python integer. Only the low 31 bits are used.
    """
    seed31 = int(seed) & 0x7FFFFFFF
    _current_seed[None] = seed31
    _seed_kernel(seed31)


def get_seed() -> int:
    """Return the seed the streams were last initialised with."""
    return int(_current_seed[None])


@ti.func
def next_uint(stream: ti.i32) -> ti.u32:
    """Draw the next raw 32-bit value from a stream.

    Args:
        stream: Index of the generator stream (0 <= stream < MAX_STREAMS).

    Returns:
        The new state of the stream, which doubles as the random value.
    """
    x = _xorshift32(_stream_states[stream])
    _stream_states[stream] = x
    return x


@ti.func
def random_float(stream: ti.i32) -> ti.f32:
    """Draw a uniform float in [0, 1) from a stream."""
    return ti.cast(next_uint(stream) >> ti.u32(8), ti.f32) * _INV_2_24


@ti.func
def random_range(stream: ti.i32, low: ti.f32, high: ti.f32) -> ti.f32:
    """Draw a uniform float in [low, high) from a stream."""
    return low + (high - low) * random_float(stream)
