"""Per-sample metric result writer.

Output format (one line per sample, read order, no header):
sample_name<TAB>value

Values use six decimal places; non-finite values are written as
inf, -inf or nan.
"""

from pathlib import Path

from sim_qc.models import MetricResults


def format_value(value: float) -> str:
    """Render a metric value with six decimal places."""
    return f"{value:.6f}"


def write_results(results: MetricResults, output_path: Path) -> Path:
    """Write metric results as tab-separated name/value lines.

    Args:
        results: Completed per-sample results
        output_path: Destination file (overwritten)

    Returns:
        Path to the written file
    """
    output_path = Path(output_path)
    with open(output_path, "w") as f:
        for sample_name, value in results:
            f.write(f"{sample_name}\t{format_value(value)}\n")
    return output_path


def write_all_results(
    results: dict[str, MetricResults],
    outputs: dict[str, Path],
) -> list[Path]:
    """Write several result sets so that either all files appear or none do.

    Each set is first written to a ``.tmp`` file beside its target. The
    temporary files are renamed over their targets only once every write
    has succeeded; on any error they are removed and no target is touched.

    Args:
        results: Completed results keyed by metric name
        outputs: Destination path for each metric in ``results``

    Returns:
        Paths of the written files, in ``outputs`` order

    Raises:
        IsADirectoryError: If a destination is an existing directory
        OSError: If a temporary file cannot be written
    """
    targets = {metric: Path(path) for metric, path in outputs.items()}
    for path in targets.values():
        if path.is_dir():
            raise IsADirectoryError(f"Output path is a directory: {path}")

    staged: list[tuple[Path, Path]] = []
    try:
        for metric, path in targets.items():
            tmp_path = path.with_name(f"{path.name}.tmp")
            staged.append((tmp_path, path))
            write_results(results[metric], tmp_path)
    except BaseException:
        for tmp_path, _ in staged:
            tmp_path.unlink(missing_ok=True)
        raise

    for tmp_path, path in staged:
        tmp_path.replace(path)
    return [path for _, path in staged]
