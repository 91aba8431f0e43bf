"""
Scoring policy: turns a list of issues into a 0-100 score.
"""

from typing import Iterable, Mapping, Optional

from .issue import Issue, Severity
from .settings import SEVERITY_WEIGHTS

MAX_SCORE = 100


def calculate_score(issues: Iterable[Issue], weights: Optional[Mapping[Severity, int]] = None) -> int:
    """100 minus the summed severity weights, floored at 0.

    No diminishing returns: enough low-severity issues still reach 0. Unknown
    severities weigh nothing, so this never raises for well-formed issues.
    """
    table = SEVERITY_WEIGHTS if weights is None else weights
    score = MAX_SCORE
    for issue in issues:
        score -= max(0, table.get(issue.severity, 0))
    return max(0, score)
