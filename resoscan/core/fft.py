"""
Transform Engine

In-place radix-2 Cooley-Tukey FFT on split real/imaginary buffers.

Technical assumptions:
- Buffers are float64 numpy arrays, length must be a power of two
- fft()/ifft() modify their arguments in place (scratch buffers owned by the caller)
- Twiddle factors are advanced by complex multiplication, one cos/sin per pass
- All other functions return new arrays
"""

import numpy as np


def is_power_of_two(n: int) -> bool:
    """Check whether n is a power of two."""
    return n > 0 and (n & (n - 1)) == 0


def next_power_of_two(n: int) -> int:
    """Return the smallest power of two >= n (1 for n <= 1)."""
    if n <= 1:
        return 1
    return 1 << (int(n) - 1).bit_length()


def real_to_complex(
    signal: np.ndarray,
    length: int | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Zero-pad a real signal into split real/imaginary buffers.

    Args:
        signal: Real input signal (1D)
        length: FFT length (default: next power of two >= len(signal))

    Returns:
        Tuple of (re, im), both float64 of the requested length

    Raises:
        ValueError: Requested length is not a power of two
    """
    signal = np.asarray(signal, dtype=np.float64)
    n = next_power_of_two(len(signal)) if length is None else length
    if not is_power_of_two(n):
        raise ValueError(f"FFT length must be a power of two, got {n}")

    re = np.zeros(n, dtype=np.float64)
    im = np.zeros(n, dtype=np.float64)
    copy_len = min(len(signal), n)
    re[:copy_len] = signal[:copy_len]
    return re, im


def fft(re: np.ndarray, im: np.ndarray) -> None:
    """
    In-place radix-2 decimation-in-time FFT.

    After the call, re and im hold the DFT coefficients X[k].

    Technical details:
    - Bit-reversal permutation, then log2(N) butterfly passes
    - Each pass evaluates cos/sin once and builds its twiddles by
      repeated complex multiplication with that base factor
    - Butterflies of one pass are computed for all blocks at once

    Args:
        re: Real parts (float64, power-of-two length)
        im: Imaginary parts (same length as re)

    Raises:
        ValueError: Length mismatch or length not a power of two
    """
    n = _check_buffers(re, im)
    if n <= 1:
        return

    order = _bit_reversal_permutation(n)
    x = re[order] + 1j * im[order]

    size = 2
    while size <= n:
        half = size // 2
        angle = -2.0 * np.pi / size  # negative for forward transform
        step = complex(np.cos(angle), np.sin(angle))

        # w_0 = 1, w_j = w_(j-1) * step
        factors = np.full(half, step, dtype=np.complex128)
        factors[0] = 1.0
        twiddles = np.cumprod(factors)

        blocks = x.reshape(-1, size)
        even = blocks[:, :half].copy()
        odd = blocks[:, half:] * twiddles
        blocks[:, :half] = even + odd
        blocks[:, half:] = even - odd

        size *= 2

    re[:] = x.real
    im[:] = x.imag


def ifft(re: np.ndarray, im: np.ndarray) -> None:
    """
    In-place inverse FFT.

    Conjugate, forward transform, conjugate and scale by 1/N.
    After the call, re and im hold the time-domain samples x[n].
    """
    n = _check_buffers(re, im)
    if n <= 1:
        return

    np.negative(im, out=im)
    fft(re, im)
    re *= 1.0 / n
    im *= -1.0 / n


def _check_buffers(re: np.ndarray, im: np.ndarray) -> int:
    """Validate split buffers and return their common length."""
    n = len(re)
    if n != len(im):
        raise ValueError(f"re and im must have the same length, got {n} and {len(im)}")
    if n > 1 and not is_power_of_two(n):
        raise ValueError(f"FFT length must be a power of two, got {n}")
    # Integer buffers would truncate on write-back
    if not (np.issubdtype(re.dtype, np.floating) and np.issubdtype(im.dtype, np.floating)):
        raise ValueError("FFT buffers must be float arrays")
    return n


def _bit_reversal_permutation(n: int) -> np.ndarray:
    """Index array mapping position i to its bit-reversed position."""
    bits = n.bit_length() - 1
    idx = np.arange(n)
    reversed_idx = np.zeros(n, dtype=np.intp)
    for _ in range(bits):
        reversed_idx = (reversed_idx << 1) | (idx & 1)
        idx = idx >> 1
    return reversed_idx
