"""
Tests für Mikrofon-Kalibrierung.
"""

import pytest
import numpy as np

from resoscan.core.calibration import (
    CalibrationData,
    CalibrationFormatError,
    CalibrationPoint,
    apply_calibration,
    interpolate_calibration,
    load_calibration_file,
    parse_calibration_file,
)
from resoscan.core.frequency_response import FrequencyPoint


SIMPLE_FILE = """
# Mic calibration
100 -2.5
1000 0.0
10000 3.1
"""


def make_calibration(*pairs):
    return CalibrationData(
        filename="cal.txt",
        points=tuple(CalibrationPoint(freq=f, db=d) for f, d in pairs),
    )


class TestParseCalibrationFile:
    """Tests für parse_calibration_file."""

    def test_simple_file(self):
        """Drei Punkte mit Kommentar und Leerzeilen."""
        result = parse_calibration_file(SIMPLE_FILE, "test.txt")

        assert result.filename == "test.txt"
        assert result.points == (
            CalibrationPoint(100.0, -2.5),
            CalibrationPoint(1000.0, 0.0),
            CalibrationPoint(10000.0, 3.1),
        )
        assert result.frequency_range == (100.0, 10000.0)

    @pytest.mark.parametrize("text", [
        "100, -1.0\n1000, 0.5",
        "100\t-1.0\n1000\t0.5",
        "100 -1.0\r\n1000 0.5\r\n",
        "\n\n100 -1.0\n\n1000 0.5\n\n",
        "# comment\n* also a comment\n100 -1.0\n1000 0.5",
        "100 -1.0 0.0\n1000 0.5 90.0",
    ])
    def test_separators_and_comments(self, text):
        """Komma, Tab, CRLF, Leerzeilen, Kommentare, Zusatzspalten."""
        result = parse_calibration_file(text, "cal.txt")

        assert len(result.points) == 2
        assert result.points[0].db == -1.0
        assert result.points[1].db == 0.5

    def test_sorted(self):
        """Punkte werden nach Frequenz sortiert."""
        result = parse_calibration_file("10000 3\n100 -2\n1000 0", "unsorted.txt")
        assert [p.freq for p in result.points] == [100.0, 1000.0, 10000.0]

    def test_scientific_notation(self):
        """Zahlen in Exponentialschreibweise."""
        result = parse_calibration_file("1e2 -1\n1.5e3 2e-1", "sci.txt")
        assert result.points[1] == CalibrationPoint(1500.0, 0.2)

    @pytest.mark.parametrize("text", ["100 0", "", "# nur Kommentar\n"])
    def test_too_few_points(self, text):
        """Weniger als 2 Datenpunkte -> Fehler."""
        with pytest.raises(CalibrationFormatError, match="at least 2 data points"):
            parse_calibration_file(text, "short.txt")

    def test_missing_column(self):
        """Zeile mit nur einer Spalte -> Fehler mit Zeilennummer."""
        with pytest.raises(CalibrationFormatError, match="line 2") as exc_info:
            parse_calibration_file("100 0\n1000\n2000 1", "bad.txt")
        assert exc_info.value.line_number == 2

    def test_invalid_frequency(self):
        """Nicht-numerische Frequenz -> Fehler."""
        with pytest.raises(CalibrationFormatError, match='invalid frequency "abc"'):
            parse_calibration_file("abc 0\n1000 1", "bad.txt")

    @pytest.mark.parametrize("freq", ["0", "-100"])
    def test_non_positive_frequency(self, freq):
        """Frequenz <= 0 -> Fehler."""
        with pytest.raises(CalibrationFormatError, match="invalid frequency"):
            parse_calibration_file(f"{freq} 0\n1000 1", "bad.txt")

    @pytest.mark.parametrize("token", ["1_000", "0x10", "inf", "1e"])
    def test_non_decimal_frequency(self, token):
        """Nur Dezimal- und Exponentialschreibweise sind gültige Zahlen."""
        with pytest.raises(CalibrationFormatError, match=f'invalid frequency "{token}"') as exc_info:
            parse_calibration_file(f"{token} 0\n2000 1", "bad.txt")
        assert exc_info.value.line_number == 1

    def test_invalid_db(self):
        """Nicht-numerischer dB-Wert -> Fehler mit Zeilennummer."""
        text = "# header\n100 0\n1000 xyz"
        with pytest.raises(CalibrationFormatError, match='invalid dB value "xyz"') as exc_info:
            parse_calibration_file(text, "bad.txt")
        assert exc_info.value.line_number == 3

    def test_error_is_value_error(self):
        """CalibrationFormatError ist ein ValueError."""
        with pytest.raises(ValueError):
            parse_calibration_file("nan 0\n100 1", "bad.txt")


class TestLoadCalibrationFile:
    """Tests für load_calibration_file."""

    def test_load(self, tmp_path):
        """Datei von der Platte laden, Dateiname wird übernommen."""
        path = tmp_path / "umik.txt"
        path.write_text(SIMPLE_FILE, encoding="utf-8")

        result = load_calibration_file(path)
        assert result.filename == "umik.txt"
        assert len(result.points) == 3

    def test_byte_order_mark(self, tmp_path):
        """UTF-8-BOM am Dateianfang wird ignoriert."""
        path = tmp_path / "bom.txt"
        path.write_text("100 -1\n1000 0\n", encoding="utf-8-sig")

        assert load_calibration_file(path).points[0].freq == 100.0

    def test_missing_file(self, tmp_path):
        """Fehlende Datei -> FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_calibration_file(tmp_path / "missing.txt")


class TestInterpolateCalibration:
    """Tests für interpolate_calibration."""

    def test_exact_points(self):
        """An Stützstellen exakt die Korrektur."""
        cal = make_calibration((100, -2), (1000, 0), (10000, 4))
        result = interpolate_calibration(cal.points, [100, 1000, 10000])
        np.testing.assert_allclose(result, [-2, 0, 4])

    def test_log_midpoint(self):
        """Logarithmische Mitte zwischen 100 Hz und 10 kHz ist 1 kHz."""
        cal = make_calibration((100, 0), (10000, 10))
        result = interpolate_calibration(cal.points, [1000])
        assert result[0] == pytest.approx(5.0)

    def test_flat_extrapolation(self):
        """Außerhalb des Bereichs gilt der Randwert."""
        cal = make_calibration((100, -2), (1000, 3))
        result = interpolate_calibration(cal.points, [10, 50000])
        np.testing.assert_allclose(result, [-2, 3])

    def test_matches_bracketed_interpolation(self):
        """Viele Zielfrequenzen, auch außerhalb des Bereichs, gegen Referenzrechnung."""
        rng = np.random.default_rng(11)
        freqs = np.sort(rng.uniform(20, 20000, size=30))
        dbs = rng.normal(scale=3, size=30)
        cal = make_calibration(*zip(freqs, dbs))
        targets = np.geomspace(5, 30000, 300)

        expected = []
        log_freqs = np.log10(freqs)
        for target in np.log10(targets):
            if target <= log_freqs[0]:
                expected.append(dbs[0])
            elif target >= log_freqs[-1]:
                expected.append(dbs[-1])
            else:
                hi = int(np.searchsorted(log_freqs, target, side="right"))
                t = (target - log_freqs[hi - 1]) / (log_freqs[hi] - log_freqs[hi - 1])
                expected.append(dbs[hi - 1] + t * (dbs[hi] - dbs[hi - 1]))

        result = interpolate_calibration(cal.points, targets)
        np.testing.assert_allclose(result, expected, atol=1e-9)

    def test_empty_calibration(self):
        """Leere Kalibrierung -> Nullkorrektur."""
        result = interpolate_calibration([], [100, 1000])
        np.testing.assert_array_equal(result, [0.0, 0.0])


class TestApplyCalibration:
    """Tests für apply_calibration."""

    def test_adds_correction(self):
        """Korrektur wird addiert, Frequenzen bleiben."""
        cal = make_calibration((100, -2), (1000, 2))
        points = [FrequencyPoint(100.0, 0.0), FrequencyPoint(1000.0, -10.0)]

        result = apply_calibration(points, cal)

        assert [p.freq for p in result] == [100.0, 1000.0]
        assert [p.db for p in result] == pytest.approx([-2.0, -8.0])

    def test_input_unchanged(self):
        """Eingabe wird nicht verändert."""
        cal = make_calibration((100, 5), (1000, 5))
        points = [FrequencyPoint(500.0, 1.0)]

        apply_calibration(points, cal)
        assert points[0].db == 1.0

    def test_empty_points(self):
        """Leerer Frequenzgang wird unverändert zurückgegeben."""
        cal = make_calibration((100, 5), (1000, 5))
        points = []
        assert apply_calibration(points, cal) is points
