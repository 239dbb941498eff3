"""
Tests für Frequenzgang-Berechnung.
"""

import pytest
import numpy as np

from resoscan.core.frequency_response import (
    FrequencyPoint,
    compute_magnitude_response,
    response_db,
    response_frequencies,
    window_ir,
)


class TestWindowIR:
    """Tests für window_ir."""

    def test_full_length_without_duration(self):
        """Ohne Dauer bleibt die volle Länge erhalten."""
        result = window_ir(np.array([1.0, 2.0, 3.0, 4.0, 5.0]), 48000)
        assert len(result) == 5
        assert result[0] == 1.0

    def test_truncation(self):
        """200 ms bei 1 kHz -> 200 Samples."""
        result = window_ir(np.ones(1000), 1000, 0.2)
        assert len(result) == 200

    def test_duration_longer_than_ir(self):
        """Dauer länger als die IR -> volle IR."""
        result = window_ir(np.ones(100), 1000, 5.0)
        assert len(result) == 100

    def test_fade_out(self):
        """Halb-Kosinus-Ausblendung über die letzten 20 %."""
        result = window_ir(np.ones(100), 1000, None, 0.2)

        assert result[0] == 1.0
        assert result[79] == 1.0
        assert result[99] < 0.02
        assert result[90] == pytest.approx(0.5, abs=0.05)
        assert np.all(np.diff(result[80:]) <= 0)

    def test_empty(self):
        """Leere IR -> leeres Ergebnis."""
        assert len(window_ir(np.zeros(0), 48000, 0.1)) == 0

    def test_input_unchanged(self):
        """Eingabe wird nicht verändert."""
        ir = np.ones(50)
        window_ir(ir, 1000)
        np.testing.assert_array_equal(ir, np.ones(50))


class TestMagnitudeResponse:
    """Tests für compute_magnitude_response."""

    def test_empty_signal(self):
        """Leeres Signal -> leere Liste."""
        assert compute_magnitude_response(np.zeros(0), 48000, 20, 15000, 100) == []

    def test_zero_points(self):
        """num_points = 0 -> leere Liste."""
        assert compute_magnitude_response(np.zeros(1024), 48000, 20, 15000, 0) == []

    def test_point_count(self):
        """Angeforderte Anzahl an Punkten."""
        signal = np.zeros(1024)
        signal[0] = 1
        assert len(compute_magnitude_response(signal, 48000, 20, 15000, 200)) == 200

    def test_log_spacing(self):
        """Logarithmische Frequenzachse von f_min bis f_max."""
        signal = np.zeros(1024)
        signal[0] = 1
        points = compute_magnitude_response(signal, 48000, 20, 15000, 100)
        freqs = response_frequencies(points)

        assert freqs[0] == pytest.approx(20)
        assert freqs[-1] == pytest.approx(15000)
        ratios = freqs[1:] / freqs[:-1]
        np.testing.assert_allclose(ratios, ratios[0], rtol=1e-9)

    def test_f_max_clamped_to_nyquist(self):
        """f_max oberhalb Nyquist wird begrenzt."""
        signal = np.zeros(256)
        signal[0] = 1
        points = compute_magnitude_response(signal, 8000, 20, 15000, 50)
        assert points[-1].freq == pytest.approx(4000)

    def test_single_point(self):
        """num_points = 1 liefert f_min."""
        signal = np.zeros(256)
        signal[0] = 1
        points = compute_magnitude_response(signal, 48000, 100, 1000, 1)
        assert len(points) == 1
        assert points[0].freq == pytest.approx(100)

    def test_delta_is_flat(self):
        """Dirac-Impuls -> 0 dB über den ganzen Bereich."""
        signal = np.zeros(4096)
        signal[0] = 1
        points = compute_magnitude_response(signal, 48000, 100, 10000, 100)

        np.testing.assert_allclose(response_db(points), 0.0, atol=0.5)

    def test_sine_peak(self):
        """Sinus bei 1 kHz -> Maximum innerhalb 5 %."""
        sr = 48000
        signal = np.sin(2 * np.pi * 1000 * np.arange(8192) / sr)
        points = compute_magnitude_response(signal, sr, 20, 15000, 500)

        peak = max(points, key=lambda p: p.db)
        assert abs(peak.freq - 1000) / 1000 < 0.05

    def test_bin_interpolation(self):
        """Log-Achse interpoliert linear zwischen benachbarten FFT-Bins."""
        sr = 48000
        signal = np.random.default_rng(5).normal(size=3000)
        points = compute_magnitude_response(signal, sr, 20, 30000, 400)

        magnitudes = np.abs(np.fft.rfft(signal, 4096))
        expected = []
        for point in points:
            exact = point.freq / (sr / 4096)
            low = int(np.floor(exact))
            if low + 1 >= len(magnitudes):
                mag = magnitudes[-1]
            else:
                frac = exact - low
                mag = magnitudes[low] * (1 - frac) + magnitudes[low + 1] * frac
            expected.append(20 * np.log10(mag))

        assert points[-1].freq == pytest.approx(sr / 2)
        np.testing.assert_allclose(response_db(points), expected, atol=1e-6)

    def test_silence_clamped(self):
        """Stille -> -120 dB statt -inf, keine NaN."""
        points = compute_magnitude_response(np.zeros(1024), 48000, 20, 15000, 100)

        for point in points:
            assert np.isfinite(point.db)
            assert point.db == -120.0


class TestResponseArrays:
    """Tests für die Array-Hilfsfunktionen."""

    def test_arrays(self):
        """Frequenzen und Pegel als numpy-Arrays."""
        points = [FrequencyPoint(100.0, -3.0), FrequencyPoint(200.0, 1.5)]

        np.testing.assert_array_equal(response_frequencies(points), [100.0, 200.0])
        np.testing.assert_array_equal(response_db(points), [-3.0, 1.5])
