"""
Issue data models for the code quality checker.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Category(Enum):
    """Issue categories."""
    SECURITY = "security"
    PERFORMANCE = "performance"
    STYLE = "style"
    BUG = "bug"
    SUGGESTION = "suggestion"


class Severity(Enum):
    """Issue severity levels, ordered from least to most severe."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    def __lt__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return _SEVERITY_RANK[self] < _SEVERITY_RANK[other]


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


class EnrichmentStatus(Enum):
    """Outcome of the optional natural-language summary step."""
    SKIPPED = "skipped"
    OK = "ok"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass(frozen=True)
class Issue:
    """A single finding reported by a detector rule."""
    category: Category
    severity: Severity
    message: str
    line: Optional[int] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "line": self.line,
            "message": self.message,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True)
class RuleFailure:
    """Marks a rule (or whole family) that raised instead of reporting."""
    family: str
    rule: str
    error: str


@dataclass(frozen=True)
class AnalysisReport:
    """Engine output for one source text."""
    issues: Tuple[Issue, ...]
    score: int
    language: str = ""
    file_path: Optional[str] = None
    summary: Optional[str] = None
    optimized_code: Optional[str] = None
    enrichment: EnrichmentStatus = EnrichmentStatus.SKIPPED
    enrichment_error: Optional[str] = None
    degraded_rules: Tuple[RuleFailure, ...] = field(default_factory=tuple)

    @property
    def degraded(self) -> bool:
        return bool(self.degraded_rules)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "issues": [i.to_dict() for i in self.issues],
            "score": self.score,
            "language": self.language,
            "filePath": self.file_path,
            "summary": self.summary,
            "optimizedCode": self.optimized_code,
            "enrichment": self.enrichment.value,
            "enrichmentError": self.enrichment_error,
            "degradedRules": [
                {"family": f.family, "rule": f.rule, "error": f.error}
                for f in self.degraded_rules
            ],
        }


@dataclass(frozen=True)
class Assessment:
    """Natural-language output of an external assessor."""
    summary: Optional[str] = None
    optimized_code: Optional[str] = None
