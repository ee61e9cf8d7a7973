"""Data loader module for reading TCX files and persisting per-file settings."""

import os
import json
import glob
import logging
from datetime import datetime
from typing import Optional, List, Sequence

import pandas as pd

from .config import Config
from .analyzer import HeartRateZone, WorkoutParameters, zone_for_heart_rate
from .report import report_filename
from .tcx_parser import ParseError, Sample, parse

logger = logging.getLogger(__name__)

TCX_EXTENSION = '.tcx'


def is_tcx_file(filepath: str) -> bool:
    """Check that a file name carries the .tcx extension (any case)."""
    return os.path.splitext(filepath)[1].lower() == TCX_EXTENSION


def get_tcx_files(directory: Optional[str] = None) -> List[str]:
    """Get list of available TCX files in the data directory.

    Args:
        directory: Directory to scan, defaults to Config.DATA_DIR

    Returns:
        Sorted list of TCX file paths
    """
    directory = directory or Config.DATA_DIR
    return sorted(f for f in glob.glob(os.path.join(directory, '*')) if is_tcx_file(f))


def load_tcx_file(filepath: str) -> List[Sample]:
    """Load heart-rate samples from a TCX file.

    Args:
        filepath: Path to the TCX file

    Returns:
        Samples sorted by elapsed seconds

    Raises:
        ParseError: if the file is not a .tcx file or holds no usable data
        OSError: if the file cannot be read
    """
    if not is_tcx_file(filepath):
        raise ParseError("unsupported file type")

    with open(filepath, 'rb') as f:
        content = f.read()
    logger.info(f"Loaded {len(content)} bytes from {filepath}")

    return parse(content)


def samples_to_dataframe(samples: Sequence[Sample],
                         zones: Optional[Sequence[HeartRateZone]] = None) -> pd.DataFrame:
    """Convert samples into a DataFrame indexed by timestamp.

    Args:
        samples: Parsed samples
        zones: Optional zone table; when given a 'zone' column holds the
            single zone key assigned to each sample

    Returns:
        DataFrame with elapsed_seconds, elapsed_minutes and heart_rate columns
    """
    df = pd.DataFrame({
        'elapsed_seconds': [s.elapsed_seconds for s in samples],
        'heart_rate': [s.heart_rate for s in samples],
    }, index=pd.DatetimeIndex([s.timestamp for s in samples], name='timestamp'))
    df['elapsed_minutes'] = (df['elapsed_seconds'] / 60).round(1)

    if zones:
        df['zone'] = [zone_for_heart_rate(hr, zones).key for hr in df['heart_rate']]

    return df


def get_workout_parameters_path(filepath: str) -> str:
    """Get the path for the workout parameters settings file.

    Args:
        filepath: Path to the TCX file

    Returns:
        Path to the settings JSON file
    """
    basename = os.path.splitext(os.path.basename(filepath))[0]
    return os.path.join(Config.SETTINGS_DIR, f'{basename}_workout_parameters.json')


def load_workout_parameters(filepath: str) -> Optional[WorkoutParameters]:
    """Load saved workout parameters for a TCX file.

    Args:
        filepath: Path to the TCX file

    Returns:
        WorkoutParameters or None if nothing usable was saved
    """
    settings_path = get_workout_parameters_path(filepath)

    try:
        with open(settings_path, 'r') as f:
            settings = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        return None

    if not isinstance(settings, dict) or not isinstance(settings.get('parameters'), dict):
        logger.warning(f"Ignoring malformed settings file {settings_path}")
        return None
    try:
        return WorkoutParameters.from_dict(settings['parameters'])
    except (TypeError, ValueError) as e:
        logger.warning(f"Ignoring unusable settings in {settings_path}: {e}")
        return None


def save_workout_parameters(filepath: str, params: WorkoutParameters) -> None:
    """Save workout parameters for a TCX file.

    Args:
        filepath: Path to the TCX file
        params: Parameters to persist
    """
    settings_path = get_workout_parameters_path(filepath)
    os.makedirs(Config.SETTINGS_DIR, exist_ok=True)

    settings = {
        'parameters': params.to_dict(),
        'timestamp': datetime.now().isoformat()
    }

    with open(settings_path, 'w') as f:
        json.dump(settings, f, indent=2)
    logger.debug(f"Saved workout parameters to {settings_path}")


def clear_workout_parameters(filepath: str) -> None:
    """Clear saved workout parameters for a TCX file.

    Args:
        filepath: Path to the TCX file
    """
    settings_path = get_workout_parameters_path(filepath)
    try:
        os.remove(settings_path)
    except FileNotFoundError:
        pass


def save_report(report_text: str, directory: Optional[str] = None,
                generated_at: Optional[datetime] = None) -> str:
    """Write a report under its conventional file name.

    Args:
        report_text: Output of build_report()
        directory: Target directory, defaults to Config.REPORT_DIR
        generated_at: Report time used for the file name, defaults to now

    Returns:
        Path of the written file
    """
    directory = directory or Config.REPORT_DIR
    generated_at = generated_at or datetime.now().astimezone()
    os.makedirs(directory, exist_ok=True)

    report_path = os.path.join(directory, report_filename(generated_at))
    with open(report_path, 'w', encoding='utf-8') as f:
        f.write(report_text)
    logger.info(f"Saved report to {report_path}")
    return report_path
