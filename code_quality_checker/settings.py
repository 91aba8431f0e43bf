"""
Tunable thresholds used by the detector families and the scoring policy.

The numbers are heuristics. They are configuration, not calibrated limits.
"""

from dataclasses import dataclass, field
from typing import Dict

from .issue import Severity

SEVERITY_WEIGHTS: Dict[Severity, int] = {
    Severity.CRITICAL: 20,
    Severity.HIGH: 10,
    Severity.MEDIUM: 5,
    Severity.LOW: 2,
}


@dataclass
class AnalysisSettings:
    """Thresholds for one engine instance."""

    severity_weights: Dict[Severity, int] = field(default_factory=lambda: dict(SEVERITY_WEIGHTS))

    # Cyclomatic complexity
    complexity_threshold: int = 10
    very_high_complexity_threshold: int = 15

    # Style
    max_line_length: int = 100
    min_identifier_length: int = 3

    # Keyword co-occurrence windows (lines looked back / ahead)
    loop_window: int = 5
    concat_window: int = 10
    async_window: int = 20
    blocking_window: int = 10

    # Performance
    max_loop_depth: int = 2
    large_array_size: int = 1000

    # Maintainability
    max_parameters: int = 5
    max_methods: int = 15
    max_properties: int = 20
    max_indent: int = 16
    max_function_length: int = 50
    max_member_calls: int = 3
    duplicate_min_length: int = 20

    def __post_init__(self) -> None:
        for severity, weight in self.severity_weights.items():
            if weight < 0:
                raise ValueError(f"Severity weight for {severity.value} must be >= 0, got {weight}")
        if self.very_high_complexity_threshold < self.complexity_threshold:
            raise ValueError("very_high_complexity_threshold must be >= complexity_threshold")


DEFAULT_SETTINGS = AnalysisSettings()
