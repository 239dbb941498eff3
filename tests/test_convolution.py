"""
Tests für FFT-basierte lineare Faltung.
"""

import pytest
import numpy as np
from scipy import signal

from resoscan.core.convolution import convolve


class TestConvolve:
    """Tests für convolve."""

    def test_small_known_result(self):
        """[1, 2, 3] * [4, 5] = [4, 13, 22, 15]."""
        result = convolve(np.array([1.0, 2.0, 3.0]), np.array([4.0, 5.0]))
        np.testing.assert_allclose(result, [4, 13, 22, 15], atol=1e-10)

    def test_output_length(self):
        """Länge = len(a) + len(b) - 1."""
        result = convolve(np.ones(100), np.ones(37))
        assert len(result) == 136

    def test_empty_input(self):
        """Leere Eingabe -> leeres Ergebnis."""
        assert len(convolve(np.zeros(0), np.ones(5))) == 0
        assert len(convolve(np.ones(5), np.zeros(0))) == 0

    def test_delta_identity(self):
        """Faltung mit Dirac liefert das Signal selbst."""
        rng = np.random.default_rng(2)
        x = rng.standard_normal(300)

        result = convolve(x, np.array([1.0]))
        np.testing.assert_allclose(result, x, atol=1e-10)

    def test_commutative(self):
        """a * b = b * a."""
        rng = np.random.default_rng(3)
        a = rng.standard_normal(123)
        b = rng.standard_normal(45)

        np.testing.assert_allclose(convolve(a, b), convolve(b, a), atol=1e-10)

    def test_matches_scipy(self):
        """Ergebnis stimmt mit scipy.signal.fftconvolve überein."""
        rng = np.random.default_rng(4)
        a = rng.standard_normal(1000)
        b = rng.standard_normal(257)

        expected = signal.fftconvolve(a, b)
        np.testing.assert_allclose(convolve(a, b), expected, atol=1e-9)

    def test_inputs_unchanged(self):
        """Eingaben werden nicht verändert."""
        a = np.array([1.0, 2.0, 3.0])
        b = np.array([0.5, -0.5])
        convolve(a, b)

        np.testing.assert_array_equal(a, [1.0, 2.0, 3.0])
        np.testing.assert_array_equal(b, [0.5, -0.5])
