"""Derived score records produced by the scoring engine.

Every record carries ``data_sufficient`` so that a zero produced by a real
measurement is never confused with a zero that only means "no data yet".
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal
from uuid import UUID

SleepDeficitCategory = Literal["surplus", "low", "medium", "high"]
SocialJetlagCategory = Literal["low", "moderate", "high"]
ShiftLagLevel = Literal["low", "moderate", "high"]
BingeRiskLevel = Literal["low", "medium", "high"]
CircadianPhaseLabel = Literal["aligned", "advanced", "delayed", "inverted", "unknown"]
TonightShiftCategory = Literal["none", "early", "day", "late", "night"]


@dataclass(frozen=True)
class SleepDeficitDay:
    """One calendar day of the weekly deficit breakdown."""

    date: date
    label: str
    required: float
    actual: float
    deficit: float


@dataclass(frozen=True)
class SleepDeficit:
    """Weekly sleep deficit against a daily requirement."""

    required_daily: float
    weekly_deficit_hours: float
    net_balance_hours: float
    category: SleepDeficitCategory
    daily: list[SleepDeficitDay] = field(default_factory=list)
    explanation: str = ""
    data_sufficient: bool = True

    @classmethod
    def insufficient(cls, required_daily: float, reason: str) -> "SleepDeficit":
        """Return the sentinel used when no sleep was logged."""
        return cls(
            required_daily=required_daily,
            weekly_deficit_hours=0.0,
            net_balance_hours=0.0,
            category="low",
            explanation=reason,
            data_sufficient=False,
        )


@dataclass(frozen=True)
class CircadianPhase:
    """Body-clock alignment derived from recent main sleep."""

    alignment_score: int
    phase: CircadianPhaseLabel
    sleep_midpoint_minutes: float | None
    deviation_hours: float
    duration_factor: float
    timing_factor: float
    debt_factor: float
    consistency_factor: float
    shift_adjustment: int
    explanation: str = ""
    data_sufficient: bool = True

    @classmethod
    def insufficient(cls, reason: str) -> "CircadianPhase":
        """Return the sentinel used when there is no dated main sleep."""
        return cls(
            alignment_score=0,
            phase="unknown",
            sleep_midpoint_minutes=None,
            deviation_hours=0.0,
            duration_factor=0.0,
            timing_factor=0.0,
            debt_factor=0.0,
            consistency_factor=0.0,
            shift_adjustment=0,
            explanation=reason,
            data_sufficient=False,
        )


@dataclass(frozen=True)
class SocialJetlag:
    """Drift of today's sleep midpoint from the personal baseline."""

    current_misalignment_hours: float | None
    weekly_average_misalignment_hours: float | None
    baseline_midpoint_clock: float | None
    current_midpoint_clock: float | None
    category: SocialJetlagCategory
    explanation: str
    data_sufficient: bool = True

    @classmethod
    def insufficient(cls, reason: str) -> "SocialJetlag":
        """Return the sentinel used below the minimum number of service days."""
        return cls(
            current_misalignment_hours=None,
            weekly_average_misalignment_hours=None,
            baseline_midpoint_clock=None,
            current_midpoint_clock=None,
            category="low",
            explanation=reason,
            data_sufficient=False,
        )


@dataclass(frozen=True)
class ShiftRhythmScore:
    """Composite 0-10 rhythm score and its 0-100 sub-scores."""

    sleep_score: int
    regularity_score: int
    shift_pattern_score: int
    recovery_score: int
    nutrition_score: int
    activity_score: int
    meal_timing_score: int
    total_score: float
    message: str
    data_sufficient: bool = True


@dataclass(frozen=True)
class ShiftLagDrivers:
    """Human-readable description of each ShiftLag component."""

    sleep_debt: str
    misalignment: str
    instability: str


@dataclass(frozen=True)
class ShiftLagMetrics:
    """0-100 shift-work jet lag score."""

    score: int
    level: ShiftLagLevel
    sleep_debt_score: int
    misalignment_score: int
    instability_score: int
    sleep_debt_hours: float
    avg_night_overlap_hours: float
    shift_start_variability_hours: float
    explanation: str
    drivers: ShiftLagDrivers
    recommendations: list[str] = field(default_factory=list)
    data_sufficient: bool = True

    @classmethod
    def insufficient(cls, reason: str) -> "ShiftLagMetrics":
        """Return the sentinel used when neither sleep nor shifts are known."""
        return cls(
            score=0,
            level="low",
            sleep_debt_score=0,
            misalignment_score=0,
            instability_score=0,
            sleep_debt_hours=0.0,
            avg_night_overlap_hours=0.0,
            shift_start_variability_hours=0.0,
            explanation=reason,
            drivers=ShiftLagDrivers(
                sleep_debt="No data", misalignment="No data", instability="No data"
            ),
            data_sufficient=False,
        )


@dataclass(frozen=True)
class BingeRisk:
    """0-100 risk of overeating with its top drivers."""

    score: int
    level: BingeRiskLevel
    drivers: list[str]
    explanation: str
    data_sufficient: bool = True


@dataclass(frozen=True)
class TonightTarget:
    """Recommended sleep duration for tonight."""

    target_hours: float
    explanation: str
    shift_category: TonightShiftCategory = "none"
    next_shift_start: datetime | None = None
    data_sufficient: bool = True


@dataclass(frozen=True)
class DailyScores:
    """Every dashboard score for one user and day."""

    user_id: UUID
    day: date
    sleep_deficit: SleepDeficit
    circadian: CircadianPhase
    social_jetlag: SocialJetlag
    shift_rhythm: ShiftRhythmScore
    shift_lag: ShiftLagMetrics
    binge_risk: BingeRisk
    tonight_target: TonightTarget
