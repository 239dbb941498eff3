"""
FFT-based linear convolution.

Output length = len(a) + len(b) - 1 (standard linear convolution).
Both signals are zero-padded to the next power of two, multiplied in the
frequency domain and transformed back; the circular wrap-around never
reaches the retained samples.
"""

import numpy as np

from .fft import fft, ifft, next_power_of_two, real_to_complex


def convolve(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Linearly convolve two real signals via FFT.

    Args:
        a: First signal (1D)
        b: Second signal (1D)

    Returns:
        New array of length len(a) + len(b) - 1 (empty if either input is empty)
    """
    if len(a) == 0 or len(b) == 0:
        return np.zeros(0, dtype=np.float64)

    out_len = len(a) + len(b) - 1
    n = next_power_of_two(out_len)

    a_re, a_im = real_to_complex(a, n)
    b_re, b_im = real_to_complex(b, n)
    fft(a_re, a_im)
    fft(b_re, b_im)

    # C = A * B
    c_re = a_re * b_re - a_im * b_im
    c_im = a_re * b_im + a_im * b_re

    ifft(c_re, c_im)

    return c_re[:out_len].copy()
