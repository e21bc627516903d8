"""Tests for the record adapter and the magnitude/xydiff engines."""

import logging
import math
from pathlib import Path

import numpy as np
import pytest

from sim_qc.exceptions import ChannelCountError, EmptyDatasetError, SampleNameError, SimFormatError
from sim_qc.metrics.adapter import RecordAdapter
from sim_qc.metrics.magnitude import MagnitudeEngine
from sim_qc.metrics.progress import report_progress
from sim_qc.metrics.xydiff import XydiffEngine
from sim_qc.models import CursorState, NumberFormat, SimHeader, SimRecord
from sim_qc.parsers.sim import SimReader


def make_header(num_probes: int = 2, num_channels: int = 2, name_size: int = 8) -> SimHeader:
    return SimHeader(
        version=1,
        name_size=name_size,
        num_samples=1,
        num_probes=num_probes,
        num_channels=num_channels,
        number_format=NumberFormat.UINT16,
    )


class CountingReader(SimReader):
    """SimReader that counts records read and passes started."""

    def __init__(self, filepath: Path) -> None:
        super().__init__(filepath)
        self.records_read = 0
        self.passes = 0

    def next_record(self):
        record = super().next_record()
        self.records_read += 1
        return record

    def iter_records(self):
        self.passes += 1
        return super().iter_records()


class TestRecordAdapter:
    """Tests for decoding records and per-probe magnitudes."""

    def test_magnitudes(self) -> None:
        adapter = RecordAdapter(make_header())
        record = SimRecord("S1", np.array([3, 4, 6, 8], dtype="<u2"))

        assert adapter.magnitudes(record).tolist() == [5.0, 10.0]

    def test_encodings_agree(self) -> None:
        """uint16 and float32 records with equal values give equal results."""
        adapter = RecordAdapter(make_header())
        as_int = SimRecord("S1", np.array([3, 4, 6, 8], dtype="<u2"))
        as_float = SimRecord("S1", np.array([3, 4, 6, 8], dtype="<f4"))

        np.testing.assert_array_equal(adapter.magnitudes(as_int), adapter.magnitudes(as_float))

    def test_many_channels(self) -> None:
        adapter = RecordAdapter(make_header(num_probes=1, num_channels=3))
        record = SimRecord("S1", np.array([1, 2, 2], dtype="<f4"))

        assert adapter.magnitudes(record).tolist() == [3.0]

    def test_intensities_shape(self) -> None:
        adapter = RecordAdapter(make_header(num_probes=3, num_channels=2))
        values = adapter.intensities(SimRecord("S1", np.arange(6, dtype="<u2")))

        assert values.shape == (3, 2)
        assert values.dtype == np.float64
        assert values[1].tolist() == [2.0, 3.0]

    def test_uint16_difference_can_be_negative(self) -> None:
        """Decoded values are floats, so no unsigned wraparound."""
        adapter = RecordAdapter(make_header(num_probes=1))
        values = adapter.intensities(SimRecord("S1", np.array([10, 4], dtype="<u2")))

        assert values[0, 1] - values[0, 0] == -6.0

    def test_name_too_long(self) -> None:
        adapter = RecordAdapter(make_header(name_size=4))

        with pytest.raises(SampleNameError):
            adapter.magnitudes(SimRecord("LONGNAME", np.zeros(4, dtype="<u2")))

    def test_wrong_value_count(self) -> None:
        adapter = RecordAdapter(make_header())

        with pytest.raises(SimFormatError):
            adapter.magnitudes(SimRecord("S1", np.zeros(3, dtype="<u2")))


class TestMagnitudeEngine:
    """Tests for the two-pass normalized magnitude."""

    def test_example_dataset(self, example_sim: Path) -> None:
        with SimReader.open(example_sim) as reader:
            engine = MagnitudeEngine(reader)
            baseline = engine.probe_baseline()
            results = engine.sample_magnitudes(baseline)

        assert baseline.tolist() == [2.5, 5.0]
        assert results.names == ["S1", "S2"]
        assert results.values == [pytest.approx(1.0), pytest.approx(1.0)]

    def test_float_encoding_matches(self, example_sim: Path, example_sim_float: Path) -> None:
        with SimReader.open(example_sim) as int_reader, SimReader.open(example_sim_float) as float_reader:
            int_results = MagnitudeEngine(int_reader).run()
            float_results = MagnitudeEngine(float_reader).run()

        assert int_results.values == float_results.values

    def test_two_passes_of_n_records(self, example_sim: Path) -> None:
        with CountingReader(example_sim) as reader:
            MagnitudeEngine(reader).run()

            assert reader.passes == 2
            assert reader.records_read == 4
            assert reader.state is CursorState.EXHAUSTED

    def test_baseline_is_deterministic(self, make_sim) -> None:
        rng = np.random.default_rng(7)
        samples = [(f"S{i}", rng.uniform(0, 5, size=10).tolist()) for i in range(6)]
        path = make_sim(samples, num_probes=5)

        with SimReader.open(path) as reader:
            engine = MagnitudeEngine(reader)
            first = engine.probe_baseline()
            second = engine.probe_baseline()

        np.testing.assert_array_equal(first, second)

    def test_baseline_is_mean_magnitude(self, make_sim) -> None:
        rng = np.random.default_rng(11)
        data = rng.uniform(0, 100, size=(4, 3, 2))
        path = make_sim(
            [(f"S{i}", data[i].ravel().tolist()) for i in range(4)],
            num_probes=3,
        )
        data32 = data.astype(np.float32).astype(np.float64)
        expected = np.sqrt((data32 ** 2).sum(axis=2)).mean(axis=0)

        with SimReader.open(path) as reader:
            baseline = MagnitudeEngine(reader).probe_baseline()

        np.testing.assert_allclose(baseline, expected, rtol=1e-12)

    def test_scale_invariance(self, make_sim) -> None:
        """Scaling every intensity by a constant leaves results unchanged."""
        samples = [
            ("A", [1, 2, 3, 4, 5, 6]),
            ("B", [2, 2, 0, 1, 7, 3]),
            ("C", [9, 1, 4, 4, 2, 8]),
        ]
        scaled = [(name, [v * 7 for v in values]) for name, values in samples]
        path = make_sim(samples, num_probes=3, number_format=NumberFormat.UINT16, filename="a.sim")
        scaled_path = make_sim(scaled, num_probes=3, number_format=NumberFormat.UINT16, filename="b.sim")

        with SimReader.open(path) as reader, SimReader.open(scaled_path) as scaled_reader:
            original = MagnitudeEngine(reader).run()
            rescaled = MagnitudeEngine(scaled_reader).run()

        np.testing.assert_allclose(original.values, rescaled.values, rtol=1e-12)

    def test_single_sample_is_one(self, make_sim) -> None:
        """With one sample every probe ratio is 1."""
        path = make_sim([("only", [3.0, 4.0, 1.0, 1.0])], num_probes=2)

        with SimReader.open(path) as reader:
            results = MagnitudeEngine(reader).run()

        assert results.values == [pytest.approx(1.0)]

    def test_zero_baseline_gives_nan(self, make_sim, caplog: pytest.LogCaptureFixture) -> None:
        """A probe with zero intensity in every sample yields nan, with a warning."""
        path = make_sim(
            [("S1", [3, 4, 0, 0]), ("S2", [6, 8, 0, 0])],
            num_probes=2,
            number_format=NumberFormat.UINT16,
        )

        with caplog.at_level(logging.WARNING), SimReader.open(path) as reader:
            results = MagnitudeEngine(reader).run()

        assert results.names == ["S1", "S2"]
        assert all(math.isnan(v) for v in results.values)
        assert results.non_finite_count == 2
        assert "zero mean magnitude" in caplog.text

    def test_zero_samples_fails_fast(self, make_sim) -> None:
        path = make_sim([], num_probes=2)

        with SimReader.open(path) as reader:
            with pytest.raises(EmptyDatasetError, match="no samples"):
                MagnitudeEngine(reader)

    def test_zero_probes_fails_fast(self, make_sim) -> None:
        path = make_sim([("S1", [])], num_probes=0)

        with SimReader.open(path) as reader:
            with pytest.raises(EmptyDatasetError, match="no probes"):
                MagnitudeEngine(reader)

    def test_progress_logging(self, make_sim, caplog: pytest.LogCaptureFixture) -> None:
        samples = [(f"S{i}", [1.0, 1.0]) for i in range(5)]
        path = make_sim(samples, num_probes=1)

        with caplog.at_level(logging.INFO), SimReader.open(path) as reader:
            MagnitudeEngine(reader, progress_interval=2).run()

        assert "Sample 1 of 5" in caplog.text
        assert "Sample 3 of 5" in caplog.text
        assert "Sample 2 of 5" not in caplog.text

    def test_on_record_callback(self, example_sim: Path) -> None:
        calls: list[int] = []

        with SimReader.open(example_sim) as reader:
            MagnitudeEngine(reader, on_record=lambda: calls.append(1)).run()

        assert len(calls) == 4


class TestXydiffEngine:
    """Tests for the XY intensity difference."""

    def test_example_dataset(self, example_sim: Path) -> None:
        with SimReader.open(example_sim) as reader:
            results = XydiffEngine(reader).run()

        assert results.names == ["S1", "S2"]
        assert results.values == [pytest.approx(0.5), pytest.approx(1.0)]

    def test_float_encoding(self, example_sim_float: Path) -> None:
        with SimReader.open(example_sim_float) as reader:
            results = XydiffEngine(reader).run()

        assert results.values == [pytest.approx(0.5), pytest.approx(1.0)]

    def test_negative_difference_uint16(self, make_sim) -> None:
        path = make_sim(
            [("S1", [10, 2, 8, 4])],
            num_probes=2,
            number_format=NumberFormat.UINT16,
        )

        with SimReader.open(path) as reader:
            results = XydiffEngine(reader).run()

        assert results.values == [pytest.approx(-6.0)]

    def test_single_pass(self, example_sim: Path) -> None:
        with CountingReader(example_sim) as reader:
            XydiffEngine(reader).run()

            assert reader.passes == 1
            assert reader.records_read == 2

    @pytest.mark.parametrize("num_channels", [1, 3])
    def test_requires_two_channels(self, make_sim, num_channels: int) -> None:
        path = make_sim([("S1", [1.0] * num_channels)], num_probes=1, num_channels=num_channels)

        with CountingReader(path) as reader:
            with pytest.raises(ChannelCountError, match="exactly two"):
                XydiffEngine(reader)
            assert reader.records_read == 0

    def test_zero_samples_fails_fast(self, make_sim) -> None:
        path = make_sim([], num_probes=2)

        with SimReader.open(path) as reader:
            with pytest.raises(EmptyDatasetError):
                XydiffEngine(reader)


class TestProgressReporting:
    """Both engines report progress through the same helper."""

    def test_xydiff_progress_logging(self, make_sim, caplog: pytest.LogCaptureFixture) -> None:
        samples = [(f"S{i}", [1.0, 2.0]) for i in range(5)]
        path = make_sim(samples, num_probes=1)
        calls: list[int] = []

        with caplog.at_level(logging.INFO), SimReader.open(path) as reader:
            XydiffEngine(reader, progress_interval=2, on_record=lambda: calls.append(1)).run()

        assert "Sample 1 of 5" in caplog.text
        assert "Sample 5 of 5" in caplog.text
        assert "Sample 4 of 5" not in caplog.text
        assert len(calls) == 5

    def test_report_progress(self, caplog: pytest.LogCaptureFixture) -> None:
        calls: list[int] = []

        with caplog.at_level(logging.INFO):
            for i in range(4):
                report_progress(i, 4, 3, on_record=lambda: calls.append(i))

        assert "Sample 1 of 4" in caplog.text
        assert "Sample 4 of 4" in caplog.text
        assert "Sample 2 of 4" not in caplog.text
        assert calls == [0, 1, 2, 3]
