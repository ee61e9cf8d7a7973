"""Plain-text HIIT analysis report."""

from datetime import datetime
from typing import List, Optional

from .analyzer import AnalysisResult, WorkoutParameters
from .utils import format_iso_date, format_locale_timestamp, round_half_up

BOX_WIDTH = 80
SECTION_RULE = '━' * 86
FOOTER_RULE = '═' * 83


def intensity_insight(perceived_intensity: int) -> str:
    if perceived_intensity >= 85:
        return '  🔥 High Intensity: Excellent effort! You maintained a very high intensity.'
    if perceived_intensity >= 70:
        return '  ⚡ Moderate-High Intensity: Good workout intensity for HIIT training.'
    return '  📈 Moderate Intensity: Consider pushing harder during active phases for better HIIT benefits.'


def recovery_insight(cumulative_recovery_score: int) -> str:
    if cumulative_recovery_score >= 150:
        return '  💪 Excellent Recovery: Your cardiovascular fitness is showing great recovery capacity.'
    if cumulative_recovery_score >= 100:
        return '  👍 Good Recovery: Solid recovery between intervals, keep building endurance.'
    return '  🎯 Building Recovery: Focus on improving recovery between intervals as fitness develops.'


def zone_focus_insight(high_intensity_percentage: int) -> str:
    if high_intensity_percentage >= 40:
        return '  🚀 High-Intensity Focus: Great time spent in high-intensity zones (80%+ max HR).'
    if high_intensity_percentage >= 20:
        return '  ⭐ Balanced Training: Good mix of intensity zones for overall fitness.'
    return '  📊 Endurance Focus: More time in lower zones - consider increasing intensity for HIIT benefits.'


def recommendations(analysis: AnalysisResult, params: WorkoutParameters) -> List[str]:
    """Recommendation lines for the next session."""
    lines = []
    if any(interval.recovery_score < 15 for interval in analysis.intervals):
        lines.append('  • Consider extending recovery phases or reducing active phase intensity')
    else:
        lines.append('  • Recovery looks good - you could potentially increase active phase intensity')
    if analysis.average_heart_rate < params.max_heart_rate * 0.75:
        lines.append('  • Try to push harder during active phases to reach higher heart rate zones')
    else:
        lines.append('  • Excellent intensity - maintain this effort level')
    lines.extend([
        '  • Track your cumulative recovery score over time to monitor fitness improvements',
        '  • Aim for consistent recovery scores across all intervals',
        '  • Ensure adequate hydration and nutrition for optimal performance',
    ])
    return lines


def _header(generated_at: datetime) -> List[str]:
    generated = f"Generated: {format_locale_timestamp(generated_at)}"
    return [
        '╔' + '═' * BOX_WIDTH + '╗',
        '║' + ' ' * 28 + 'HIIT TRAINING ANALYSIS REPORT' + ' ' * 23 + '║',
        '║' + ' ' * 26 + generated + ' ' * 25 + '║',
        '╚' + '═' * BOX_WIDTH + '╝',
    ]


def _section(title: str, body: List[str]) -> List[str]:
    return ['', title, SECTION_RULE] + body


def build_report(analysis: AnalysisResult, params: WorkoutParameters,
                 generated_at: Optional[datetime] = None) -> str:
    """Render the full text report for an analysis.

    Args:
        analysis: Result of analyze()
        params: Parameters the analysis was run with
        generated_at: Report time, defaults to now

    Returns:
        The complete report text
    """
    if generated_at is None:
        generated_at = datetime.now().astimezone()

    summary = [
        f"  • Average Heart Rate:        {analysis.average_heart_rate} bpm",
        f"  • Perceived Intensity:       {analysis.perceived_intensity}%",
        f"  • Estimated Calories:        {analysis.calories} kcal",
        f"  • Total Duration:            {analysis.total_duration_minutes} minutes",
        f"  • Cumulative Recovery Score: {analysis.cumulative_recovery_score}",
    ]

    zones = [
        f"  Zone {zone.label:<20} {zone.lower_bound:>3}-{zone.upper_bound:<3} bpm  "
        f"({analysis.zone_percentage(zone.key):>2}% of workout)"
        for zone in analysis.zones
    ]

    parameters = [
        f"  • Maximum Heart Rate:    {params.max_heart_rate} bpm",
        f"  • Age:                   {params.age} years",
        f"  • Weight:                {params.weight_kg:g} kg",
        f"  • Warmup Duration:       {round_half_up(params.warmup_seconds / 60)} minutes",
        f"  • Active Phase:          {params.active_phase_seconds} seconds",
        f"  • Recovery Phase:        {params.recovery_phase_seconds} seconds",
        f"  • Number of Intervals:   {params.interval_count}",
        f"  • Cooldown Duration:     {round_half_up(params.cooldown_seconds / 60)} minutes",
    ]

    intervals = [
        f"  Interval {interval.index:>2}: {interval.peak_active_heart_rate:>3} bpm → "
        f"{interval.trough_recovery_heart_rate:>3} bpm "
        f"(Recovery Score: {interval.recovery_score:>2})"
        for interval in analysis.intervals
    ]
    intervals += [
        ' ' * 59 + '─' * 21,
        ' ' * 48 + f"Total Score: {analysis.cumulative_recovery_score:>3}",
    ]

    insights = [
        intensity_insight(analysis.perceived_intensity),
        '',
        recovery_insight(analysis.cumulative_recovery_score),
        '',
        zone_focus_insight(analysis.high_intensity_percentage()),
    ]

    lines = [''] + _header(generated_at)
    lines += _section('📊 WORKOUT SUMMARY', summary)
    lines += _section('❤️ HEART RATE ZONES', zones)
    lines += _section('🏃 TRAINING PARAMETERS', parameters)
    lines += _section('📈 INTERVAL-BY-INTERVAL RECOVERY ANALYSIS', intervals)
    lines += _section('💡 PERFORMANCE INSIGHTS', insights)
    lines += _section('📋 RECOMMENDATIONS FOR NEXT SESSION', recommendations(analysis, params))
    lines += [
        '',
        FOOTER_RULE,
        'Generated by HIIT Training Analyzer - Advanced Heart Rate Analysis',
        f"Report saved: {format_iso_date(generated_at)}",
        FOOTER_RULE,
        '',
    ]
    return '\n'.join(lines)


def report_filename(generated_at: Optional[datetime] = None) -> str:
    """Conventional file name for a report; the date matches the footer's."""
    if generated_at is None:
        generated_at = datetime.now().astimezone()
    return f"hiit-analysis-report-{format_iso_date(generated_at)}.txt"
