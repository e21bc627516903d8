"""Configuration dataclass for a QC metrics run."""

from dataclasses import dataclass
from pathlib import Path


@dataclass
class Config:
    """Configuration for computing QC metrics from a .sim file.

    Attributes:
        sim_file: Path to input .sim (or .sim.gz) file
        magnitude_file: Output path for normalized magnitude (None to skip)
        xydiff_file: Output path for XY intensity difference (None to skip)
        verbose: Enable verbose logging
        progress_interval: Log progress every this many samples
        log_dir: Directory for the rotating log file (None for console only)
    """

    sim_file: Path
    magnitude_file: Path | None = None
    xydiff_file: Path | None = None

    # Behavior flags
    verbose: bool = False
    progress_interval: int = 1000
    log_dir: Path | None = None

    def __post_init__(self) -> None:
        """Ensure paths are Path objects."""
        self.sim_file = Path(self.sim_file)
        if self.magnitude_file is not None:
            self.magnitude_file = Path(self.magnitude_file)
        if self.xydiff_file is not None:
            self.xydiff_file = Path(self.xydiff_file)
        if self.log_dir is not None:
            self.log_dir = Path(self.log_dir)

    @property
    def file_stem(self) -> str:
        """Get the stem of the input file, without .sim/.gz extensions."""
        name = self.sim_file.name
        for suffix in (".gz", ".sim"):
            if name.endswith(suffix):
                name = name[: -len(suffix)]
        return name

    @property
    def outputs(self) -> dict[str, Path]:
        """Requested metrics mapped to their output paths, in run order."""
        outputs: dict[str, Path] = {}
        if self.magnitude_file is not None:
            outputs["magnitude"] = self.magnitude_file
        if self.xydiff_file is not None:
            outputs["xydiff"] = self.xydiff_file
        return outputs

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors: list[str] = []

        if not self.sim_file.exists():
            errors.append(f"SIM file not found: {self.sim_file}")

        if not self.outputs:
            errors.append("No metric requested: give a magnitude and/or xydiff output path")

        for metric, path in self.outputs.items():
            if not path.parent.exists():
                errors.append(f"Output directory for {metric} does not exist: {path.parent}")
            elif path.is_dir():
                errors.append(f"Output path for {metric} is a directory: {path}")

        if self.progress_interval < 1:
            errors.append(f"progress_interval must be at least 1: {self.progress_interval}")

        return errors
