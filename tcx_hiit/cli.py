"""Command-line entry point: analyze a TCX file and print or save the report."""

import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional

from .analyzer import WorkoutParameters, analyze
from .config import Config
from .data_loader import (
    load_tcx_file, load_workout_parameters, save_report, save_workout_parameters
)
from .report import build_report
from .tcx_parser import ParseError

logger = logging.getLogger(__name__)

# CLI option -> WorkoutParameters field
PARAMETER_OPTIONS = {
    'max_hr': 'max_heart_rate',
    'age': 'age',
    'weight': 'weight_kg',
    'warmup': 'warmup_seconds',
    'active': 'active_phase_seconds',
    'recovery': 'recovery_phase_seconds',
    'intervals': 'interval_count',
    'cooldown': 'cooldown_seconds',
    'gender': 'gender',
}


def positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive integer")
    return number


def positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive number")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='tcx-hiit',
        description='Analyze HIIT heart-rate data from a TCX file.'
    )
    parser.add_argument('file', help='TCX activity file')
    parser.add_argument('--max-hr', type=positive_int, help='Maximum heart rate (bpm)')
    parser.add_argument('--age', type=positive_int, help='Age in years')
    parser.add_argument('--weight', type=positive_float, help='Body weight (kg)')
    parser.add_argument('--warmup', type=positive_int, help='Warmup duration (s)')
    parser.add_argument('--active', type=positive_int, help='Active phase duration (s)')
    parser.add_argument('--recovery', type=positive_int, help='Recovery phase duration (s)')
    parser.add_argument('--intervals', type=positive_int, help='Number of intervals')
    parser.add_argument('--cooldown', type=positive_int, help='Cooldown duration (s)')
    parser.add_argument('--gender', choices=['male', 'female'], help='Used for the calorie estimate')
    parser.add_argument('--save-params', action='store_true',
                        help='Remember these parameters for this file')
    parser.add_argument('--output', metavar='DIR',
                        help='Write the report to DIR instead of printing it')
    return parser


def resolve_parameters(args: argparse.Namespace) -> WorkoutParameters:
    """Command-line values over saved per-file values over defaults."""
    saved = load_workout_parameters(args.file) or WorkoutParameters()
    values = saved.to_dict()
    for option, field in PARAMETER_OPTIONS.items():
        value = getattr(args, option)
        if value is not None:
            values[field] = value
    return WorkoutParameters.from_dict(values)


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    args = build_parser().parse_args(argv)

    try:
        samples = load_tcx_file(args.file)
    except ParseError as e:
        logger.error(f"Error parsing TCX file {args.file}: {e.reason}")
        return 1
    except OSError as e:
        logger.error(f"Error reading {args.file}: {e}")
        return 1

    try:
        params = resolve_parameters(args)
    except ValueError as e:
        logger.error(f"Invalid workout parameters: {e}")
        return 1
    if args.save_params:
        save_workout_parameters(args.file, params)

    analysis = analyze(samples, params)
    generated_at = datetime.now().astimezone()
    report_text = build_report(analysis, params, generated_at)

    if args.output:
        save_report(report_text, args.output, generated_at)
    else:
        sys.stdout.write(report_text)
    return 0


if __name__ == '__main__':
    sys.exit(main())
