"""Order-0 Shannon entropy of a byte sample.

H = -sum(p_i * log2(p_i)) over the 256 byte values, in bits per byte:
  - 0.0 for a run of one repeated byte
  - 8.0 for a uniform spread over all 256 values
"""

import numpy as np

from .classifier import as_byte_view


def byte_histogram(data) -> np.ndarray:
    """256-bucket frequency histogram of a byte sample."""
    arr = np.frombuffer(as_byte_view(data), dtype=np.uint8)
    return np.bincount(arr, minlength=256)


def shannon_entropy(data) -> float:
    """Measure Shannon entropy of a byte sample in bits per byte.

    Args:
        data: Bytes-like sample. An empty sample has entropy 0.0.

    Returns:
        Entropy in [0, 8].
    """
    counts = byte_histogram(data)
    total = counts.sum()
    if total == 0:
        return 0.0
    probs = counts[counts > 0] / total
    entropy = float(-np.sum(probs * np.log2(probs)))
    if entropy <= 0.0:
        return 0.0
    return min(entropy, 8.0)
