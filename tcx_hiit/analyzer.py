"""HIIT analysis of a heart-rate series.

The interval structure is declared by the athlete (warmup, active and
recovery phase lengths, interval count, cooldown) rather than detected from
the signal, so phase boundaries are plain offsets from the start.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from .config import Config
from .tcx_parser import Sample
from .utils import round_half_up

logger = logging.getLogger(__name__)

# camelCase aliases accepted by WorkoutParameters.from_dict
_PARAMETER_ALIASES = {
    'maxHR': 'max_heart_rate',
    'age': 'age',
    'weight': 'weight_kg',
    'warmupTime': 'warmup_seconds',
    'activePhase': 'active_phase_seconds',
    'recoveryPhase': 'recovery_phase_seconds',
    'intervals': 'interval_count',
    'cooldownTime': 'cooldown_seconds',
}


@dataclass(frozen=True)
class WorkoutParameters:
    """Athlete and session structure for one analysis run."""
    max_heart_rate: int = Config.DEFAULT_MAX_HR
    age: int = Config.DEFAULT_AGE
    weight_kg: float = Config.DEFAULT_WEIGHT_KG
    warmup_seconds: int = Config.DEFAULT_WARMUP_SECONDS
    active_phase_seconds: int = Config.DEFAULT_ACTIVE_SECONDS
    recovery_phase_seconds: int = Config.DEFAULT_RECOVERY_SECONDS
    interval_count: int = Config.DEFAULT_INTERVALS
    cooldown_seconds: int = Config.DEFAULT_COOLDOWN_SECONDS
    gender: str = Config.DEFAULT_GENDER

    def __post_init__(self):
        for name in ('max_heart_rate', 'weight_kg', 'active_phase_seconds',
                     'recovery_phase_seconds', 'interval_count'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        for name in ('warmup_seconds', 'cooldown_seconds'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative, got {getattr(self, name)}")
        # The calorie estimate needs a positive heart-rate reserve
        max_age = Config.HR_UPPER_LIMIT - Config.RESTING_HR
        if not 0 < self.age < max_age:
            raise ValueError(f"age must be between 1 and {max_age - 1}, got {self.age}")

    @property
    def cycle_length(self) -> int:
        return self.active_phase_seconds + self.recovery_phase_seconds

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WorkoutParameters':
        """Build parameters from snake_case or camelCase keys.

        Unknown keys are ignored and missing keys keep their defaults. Values
        are converted to the field types, so '6' becomes 6.

        Raises:
            ValueError: if a value cannot be converted or is out of range
        """
        fields = cls.__dataclass_fields__
        values = {}
        for key, value in data.items():
            name = _PARAMETER_ALIASES.get(key, key)
            if name not in fields or value is None:
                continue
            field_type = fields[name].type
            if isinstance(value, (bool, list, dict)):
                raise ValueError(f"{name} has an unusable value: {value!r}")
            values[name] = field_type(value)
        return cls(**values)


@dataclass(frozen=True)
class HeartRateZone:
    key: str
    lower_bound: int
    upper_bound: int
    label: str
    color: str

    def contains(self, heart_rate: int) -> bool:
        return self.lower_bound <= heart_rate <= self.upper_bound


@dataclass(frozen=True)
class IntervalResult:
    index: int
    start_second: int
    active_end_second: int
    recovery_end_second: int
    peak_active_heart_rate: int
    trough_recovery_heart_rate: int
    recovery_score: int


@dataclass(frozen=True)
class AnalysisResult:
    zones: List[HeartRateZone]
    intervals: List[IntervalResult]
    cumulative_recovery_score: int
    zone_distribution: Dict[str, int]
    average_heart_rate: int
    perceived_intensity: int
    calories: int
    total_duration_seconds: int
    total_duration_minutes: int
    warmup_end_second: int
    cooldown_start_second: int
    sample_count: int

    def zone_percentage(self, zone_key: str) -> int:
        """Share of samples counted in a zone, as a rounded percentage."""
        count = self.zone_distribution.get(zone_key, 0)
        return round_half_up(count / self.sample_count * 100)

    def high_intensity_percentage(self) -> int:
        """Rounded percentage of samples counted in zones 4 and 5."""
        count = self.zone_distribution.get('zone4', 0) + self.zone_distribution.get('zone5', 0)
        return round_half_up(count / self.sample_count * 100)


def calculate_hr_zones(max_heart_rate: int) -> List[HeartRateZone]:
    """Derive the five training zones from a maximum heart rate.

    Bounds are rounded fractions of the max; adjacent zones share their
    boundary value and the top zone ends at the max itself.
    """
    fractions = Config.ZONE_FRACTIONS
    zones = []
    for i, key in enumerate(Config.ZONE_LABELS):
        lower = round_half_up(max_heart_rate * fractions[i])
        if i == len(fractions) - 2:
            upper = max_heart_rate
        else:
            upper = round_half_up(max_heart_rate * fractions[i + 1])
        zones.append(HeartRateZone(
            key=key,
            lower_bound=lower,
            upper_bound=upper,
            label=Config.ZONE_LABELS[key],
            color=Config.get_zone_color(key),
        ))
    return zones


def zone_for_heart_rate(heart_rate: int, zones: Sequence[HeartRateZone]) -> HeartRateZone:
    """Assign a single zone: the lowest one containing the heart rate.

    Heart rates outside every zone fall back to the first zone.
    """
    for zone in zones:
        if zone.contains(heart_rate):
            return zone
    return zones[0]


def calculate_zone_distribution(heart_rates: np.ndarray,
                                zones: Sequence[HeartRateZone]) -> Dict[str, int]:
    """Count samples per zone; boundary values count toward both neighbours."""
    return {
        zone.key: int(np.count_nonzero((heart_rates >= zone.lower_bound) &
                                       (heart_rates <= zone.upper_bound)))
        for zone in zones
    }


def calculate_calories(avg_hr: float, weight_kg: float, duration_minutes: float,
                       age: int, gender: str = 'male') -> int:
    """Estimate calories with the heart-rate reserve method.

    Uses the population max heart rate (220 - age) and a fixed resting heart
    rate, mapped linearly onto 3.5-12 METs.

    Args:
        avg_hr: Average heart rate over the session
        weight_kg: Body weight in kilograms
        duration_minutes: Session duration in minutes
        age: Age in years
        gender: 'male' or 'female'

    Returns:
        Estimated kilocalories, rounded

    Raises:
        ValueError: if the age leaves no heart-rate reserve
    """
    max_hr = Config.HR_UPPER_LIMIT - age
    resting_hr = Config.RESTING_HR
    hr_reserve = max_hr - resting_hr
    if hr_reserve <= 0:
        raise ValueError(f"No heart-rate reserve at age {age}")
    working_hr = avg_hr - resting_hr
    hr_intensity = working_hr / hr_reserve

    gender_factor = 1.0 if gender == 'male' else Config.FEMALE_CALORIE_FACTOR

    mets = 3.5 + (hr_intensity * 8.5)
    calories_per_minute = (mets * 3.5 * weight_kg * gender_factor) / 200

    return round_half_up(calories_per_minute * duration_minutes)


def extract_interval(index: int, times: np.ndarray, heart_rates: np.ndarray,
                     params: WorkoutParameters, warmup_end: int,
                     cooldown_start: int) -> Optional[IntervalResult]:
    """Score one declared interval, or return None when it cannot be scored.

    Args:
        index: Zero-based interval number
        times: Elapsed seconds of every sample
        heart_rates: Heart rate of every sample
        params: Workout parameters
        warmup_end: Second at which the first interval starts
        cooldown_start: Second at which the cooldown starts

    Returns:
        IntervalResult, or None if the interval runs into the cooldown or
        either phase has no samples
    """
    interval_start = warmup_end + index * params.cycle_length
    active_end = interval_start + params.active_phase_seconds
    recovery_end = interval_start + params.cycle_length

    if recovery_end > cooldown_start:
        return None

    active_mask = (times >= interval_start) & (times <= active_end)
    recovery_mask = (times > active_end) & (times <= recovery_end)
    if not active_mask.any() or not recovery_mask.any():
        logger.debug(f"Interval {index + 1} has no samples in one of its phases")
        return None

    peak = int(heart_rates[active_mask].max())
    trough = int(heart_rates[recovery_mask].min())

    return IntervalResult(
        index=index + 1,
        start_second=interval_start,
        active_end_second=active_end,
        recovery_end_second=recovery_end,
        peak_active_heart_rate=peak,
        trough_recovery_heart_rate=trough,
        recovery_score=peak - trough,
    )


def analyze(samples: Sequence[Sample], params: WorkoutParameters) -> AnalysisResult:
    """Main HIIT analysis.

    Args:
        samples: Non-empty samples sorted by elapsed seconds
        params: Workout parameters for this run

    Returns:
        AnalysisResult with zones, scored intervals and session aggregates
    """
    if not samples:
        raise ValueError("analyze() needs at least one sample")

    times = np.array([s.elapsed_seconds for s in samples], dtype=np.int64)
    heart_rates = np.array([s.heart_rate for s in samples], dtype=np.int64)

    # Step 1: Zones
    zones = calculate_hr_zones(params.max_heart_rate)

    # Step 2: Phase boundaries
    total_duration = int(times[-1])
    warmup_end = params.warmup_seconds
    cooldown_start = total_duration - params.cooldown_seconds

    # Step 3: Intervals
    intervals = []
    for i in range(params.interval_count):
        interval = extract_interval(i, times, heart_rates, params, warmup_end, cooldown_start)
        if interval is not None:
            intervals.append(interval)

    # Step 4: Cumulative recovery
    cumulative_recovery_score = sum(interval.recovery_score for interval in intervals)

    # Step 5: Zone distribution
    zone_distribution = calculate_zone_distribution(heart_rates, zones)

    # Step 6: Average heart rate and intensity
    avg_hr = round_half_up(heart_rates.sum() / len(heart_rates))
    perceived_intensity = round_half_up(avg_hr / params.max_heart_rate * 100)

    # Step 7: Calories
    duration_minutes = total_duration / 60
    calories = calculate_calories(avg_hr, params.weight_kg, duration_minutes,
                                  params.age, params.gender)

    logger.info(f"Analyzed {len(samples)} samples: {len(intervals)} of "
                f"{params.interval_count} intervals scored, avg HR {avg_hr}")

    return AnalysisResult(
        zones=zones,
        intervals=intervals,
        cumulative_recovery_score=cumulative_recovery_score,
        zone_distribution=zone_distribution,
        average_heart_rate=avg_hr,
        perceived_intensity=perceived_intensity,
        calories=calories,
        total_duration_seconds=total_duration,
        total_duration_minutes=round_half_up(duration_minutes),
        warmup_end_second=warmup_end,
        cooldown_start_second=cooldown_start,
        sample_count=len(samples),
    )
