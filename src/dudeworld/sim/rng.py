from __future__ import annotations

import hashlib
import random


def derive_stream_seed(master_seed: int, stream_name: str) -> int:
    """Derive a deterministic child RNG seed from (master_seed, stream_name)."""
    digest = hashlib.sha256(f"{master_seed}:{stream_name}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=False)


def number_from_range(rng: random.Random, low: float, high: float) -> float:
    """Uniform float in [low, high)."""
    if high <= low:
        return float(low)
    return low + rng.random() * (high - low)


def int_from_range(rng: random.Random, low: int, high: int) -> int:
    """Uniform int in [low, high)."""
    if high <= low:
        return int(low)
    return rng.randrange(low, high)
