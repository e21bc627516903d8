"""Pytest fixtures for sim_qc tests."""

from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

import pytest

from sim_qc.logging_config import reset_logging
from sim_qc.models import NumberFormat
from sim_qc.writers.sim import SimWriter

SimFactory = Callable[..., Path]


@pytest.fixture(autouse=True)
def clean_logging() -> Iterator[None]:
    """Reset logging handlers between tests."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def make_sim(tmp_path: Path) -> SimFactory:
    """Factory writing a .sim file from (name, intensities) pairs.

    Intensities are flat, probe-major: [p0c0, p0c1, p1c0, p1c1, ...].
    """

    def _make(
        samples: Sequence[tuple[str, Sequence[float]]],
        num_probes: int,
        num_channels: int = 2,
        number_format: NumberFormat = NumberFormat.FLOAT32,
        name_size: int = 40,
        filename: str = "test.sim",
    ) -> Path:
        path = tmp_path / filename
        with SimWriter(
            path,
            num_probes=num_probes,
            num_channels=num_channels,
            number_format=number_format,
            name_size=name_size,
        ) as writer:
            for name, values in samples:
                writer.write_record(name, values)
        return path

    return _make


@pytest.fixture
def example_samples() -> list[tuple[str, list[float]]]:
    """Two probes, two channels, two samples.

    S1 = [(3, 4), (0, 0)] -> magnitudes [5, 0]
    S2 = [(0, 0), (6, 8)] -> magnitudes [0, 10]
    """
    return [
        ("S1", [3, 4, 0, 0]),
        ("S2", [0, 0, 6, 8]),
    ]


@pytest.fixture
def example_sim(make_sim: SimFactory, example_samples: list[tuple[str, list[float]]]) -> Path:
    """The two-sample example dataset in uint16 encoding."""
    return make_sim(example_samples, num_probes=2, number_format=NumberFormat.UINT16)


@pytest.fixture
def example_sim_float(make_sim: SimFactory, example_samples: list[tuple[str, list[float]]]) -> Path:
    """The two-sample example dataset in float32 encoding."""
    return make_sim(
        example_samples,
        num_probes=2,
        number_format=NumberFormat.FLOAT32,
        filename="test_float.sim",
    )
