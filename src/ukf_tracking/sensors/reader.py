"""
Reader and writer for recorded measurement files.

Each line holds one measurement, whitespace (usually tab) separated:

    L  px   py    timestamp  [gt_px gt_py gt_vx gt_vy [gt_yaw gt_yawrate]]
    R  rho  phi   rho_dot    timestamp  [gt_px gt_py gt_vx gt_vy [gt_yaw gt_yawrate]]

Timestamps are integers in microseconds. The ground-truth columns are
optional; when the six-column variant is present only the first four are
kept. Blank lines and lines starting with ``#`` are skipped.
"""

import logging
import os
from typing import Iterable, List, Union

import numpy as np

from ..errors import MeasurementParseError, UnknownSensorError
from .measurement import MeasurementRecord, MeasurementSample, SensorType

logger = logging.getLogger(__name__)

GROUND_TRUTH_WIDTHS = (0, 4, 6)


def parse_line(line: str, line_number: int = None) -> MeasurementRecord:
    """
    Parse one measurement line.

    Args:
        line: Text of the record
        line_number: Optional 1-based line number used in error messages

    Returns:
        MeasurementRecord with the sample and ground truth (if present)

    Raises:
        MeasurementParseError: If the line is malformed or names an unknown sensor
    """
    fields = line.split()
    if not fields:
        raise MeasurementParseError("empty record", line_number)

    try:
        sensor_type = SensorType.from_tag(fields[0])
    except UnknownSensorError as exc:
        raise MeasurementParseError(str(exc), line_number) from exc

    n_meas = sensor_type.measurement_size
    if len(fields) < n_meas + 2:
        raise MeasurementParseError(
            f"{sensor_type.name} record needs {n_meas} values and a timestamp, got {len(fields) - 1} fields",
            line_number)

    try:
        values = np.array([float(v) for v in fields[1:n_meas + 1]])
        timestamp = int(fields[n_meas + 1])
        extra = [float(v) for v in fields[n_meas + 2:]]
    except ValueError as exc:
        raise MeasurementParseError(f"invalid number: {exc}", line_number) from exc

    if len(extra) not in GROUND_TRUTH_WIDTHS:
        raise MeasurementParseError(
            f"expected 0, 4 or 6 ground-truth values, got {len(extra)}", line_number)

    try:
        sample = MeasurementSample(sensor_type, values, timestamp)
        ground_truth = np.array(extra[:4]) if extra else None
        return MeasurementRecord(sample, ground_truth)
    except ValueError as exc:
        raise MeasurementParseError(str(exc), line_number) from exc


def read_measurements(source: Union[str, os.PathLike, Iterable[str]]) -> List[MeasurementRecord]:
    """
    Read every record from a file path or an iterable of lines.

    Args:
        source: Path to a measurement file, or lines of text

    Returns:
        Records in file order

    Raises:
        MeasurementParseError: On the first malformed line
    """
    if isinstance(source, (str, os.PathLike)):
        with open(source, encoding='utf-8') as f:
            return read_measurements(f.readlines())

    records = []
    for line_number, line in enumerate(source, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith('#'):
            continue
        records.append(parse_line(stripped, line_number))

    logger.info(f"Read {len(records)} measurement records")
    return records


def format_record(record: MeasurementRecord) -> str:
    """Format a record as one tab-separated line (no trailing newline)."""
    sample = record.sample
    fields = [sample.sensor_type.value]
    fields.extend(f"{v:.6e}" for v in sample.raw_measurements)
    fields.append(str(sample.timestamp))
    if record.ground_truth is not None:
        fields.extend(f"{v:.6e}" for v in record.ground_truth)
    return "\t".join(fields)


def write_measurements(records: Iterable[MeasurementRecord], path: Union[str, os.PathLike]) -> None:
    """Write records to ``path`` in the format read by ``read_measurements``."""
    with open(path, 'w', encoding='utf-8') as f:
        for record in records:
            f.write(format_record(record) + "\n")
