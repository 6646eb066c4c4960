"""Per-task random number streams for Monte Carlo sampling.

Every consumer of randomness receives an explicit stream handle (an index
into a table of 32-bit generator states) instead of drawing from a global
generator. The renderer gives each pixel its own stream, so pixels can be
traced in parallel while the result stays bit-reproducible for a given seed.

The generator is the PCG hash from "Hash Functions for GPU Rendering"
(Jarzynski and Olano, JCGT 2020), iterated on the stored state.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretrace.core.sampler import seed_streams, random_f64
    >>> seed_streams(seed=7, count=16)
    >>> # Inside a Taichi kernel: x = random_f64(stream)
"""

import taichi as ti

# One stream per pixel of the largest supported image
MAX_STREAMS = 1024 * 1024

_PCG_MULTIPLIER = 747796405
_PCG_INCREMENT = 2891336453
_PCG_OUTPUT_MULTIPLIER = 277803737
_SEED_SCRAMBLE = 0x9E3779B9

# 2^26 and 2^53, used to assemble a 53-bit mantissa from two draws
_TWO_POW_26 = 67108864.0
_TWO_POW_53 = 9007199254740992.0

_rng_state = ti.field(dtype=ti.u32, shape=MAX_STREAMS)
_num_streams = ti.field(dtype=ti.i32, shape=())


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Hash a 32-bit value with the PCG output permutation.

    Args:
        value: The input word.

    Returns:
        A well-mixed 32-bit word.
    """
    state = value * ti.u32(_PCG_MULTIPLIER) + ti.u32(_PCG_INCREMENT)
    word = ((state >> ((state >> ti.u32(28)) + ti.u32(4))) ^ state) * ti.u32(
        _PCG_OUTPUT_MULTIPLIER
    )
    return (word >> ti.u32(22)) ^ word


@ti.kernel
def _seed_streams_kernel(seed: ti.u32, count: ti.i32):
    for i in range(count):
        _rng_state[i] = pcg_hash(ti.cast(i, ti.u32) ^ (seed * ti.u32(_SEED_SCRAMBLE)))


def seed_streams(seed: int, count: int) -> None:
    """Seed the first ``count`` random streams from a single render seed.

    Stream ``i`` depends only on ``seed`` and ``i``, so reseeding with the
    same value replays exactly the same sequences.

    Args:
        seed: The render seed. Only the low 32 bits are used.
        count: Number of streams to initialise.

    Raises:
        ValueError: If count is outside [1, MAX_STREAMS].
    """
    if count < 1 or count > MAX_STREAMS:
        raise ValueError(f"Stream count {count} is outside [1, {MAX_STREAMS}]")
    _seed_streams_kernel(seed & 0xFFFFFFFF, count)
    _num_streams[None] = count


def get_stream_count() -> int:
    """Get the number of streams seeded by the last seed_streams() call."""
    return int(_num_streams[None])


@ti.func
def _next_u32(stream: ti.i32) -> ti.u32:
    state = pcg_hash(_rng_state[stream])
    _rng_state[stream] = state
    return state


@ti.func
def random_f64(stream: ti.i32) -> ti.f64:
    """Draw a uniform double in [0, 1) from a stream.

    Args:
        stream: The stream index (must have been seeded).

    Returns:
        A double with 53 random mantissa bits.
    """
    high = ti.cast(_next_u32(stream) >> ti.u32(5), ti.f64)
    low = ti.cast(_next_u32(stream) >> ti.u32(6), ti.f64)
    return (high * _TWO_POW_26 + low) / _TWO_POW_53


@ti.func
def random_range(stream: ti.i32, lo: ti.f64, hi: ti.f64) -> ti.f64:
    """Draw a uniform double in [lo, hi) from a stream."""
    return lo + (hi - lo) * random_f64(stream)
