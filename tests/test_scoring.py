"""Tests for the scoring policy and analysis settings."""

import pytest

from code_quality_checker.issue import Category, Issue, Severity
from code_quality_checker.scoring import MAX_SCORE, calculate_score
from code_quality_checker.settings import AnalysisSettings


def _issue(severity: Severity) -> Issue:
    return Issue(Category.STYLE, severity, "finding", line=1)


class TestCalculateScore:
    """Tests for calculate_score."""

    def test_no_issues_scores_maximum(self):
        """Given no issues, the score is 100."""
        assert calculate_score([]) == MAX_SCORE == 100

    def test_weights_per_severity(self):
        """Given one issue of each severity, the weights are 20/10/5/2."""
        assert calculate_score([_issue(Severity.CRITICAL)]) == 80
        assert calculate_score([_issue(Severity.HIGH)]) == 90
        assert calculate_score([_issue(Severity.MEDIUM)]) == 95
        assert calculate_score([_issue(Severity.LOW)]) == 98

    def test_score_clamps_at_zero(self):
        """Given enough low-severity issues, the score reaches 0 and stays there."""
        assert calculate_score([_issue(Severity.LOW)] * 60) == 0

    def test_adding_issues_never_raises_score(self):
        """Given a growing list of issues, the score is non-increasing."""
        # Given
        severities = [Severity.LOW, Severity.CRITICAL, Severity.MEDIUM, Severity.HIGH] * 4
        issues = []
        previous = calculate_score(issues)

        for severity in severities:
            # When
            issues.append(_issue(severity))
            score = calculate_score(issues)

            # Then
            assert score <= previous
            previous = score

    def test_unknown_severity_weighs_nothing(self):
        """Given a weight table missing a severity, that severity costs 0."""
        weights = {Severity.CRITICAL: 20}
        assert calculate_score([_issue(Severity.LOW)], weights) == 100
        assert calculate_score([_issue(Severity.CRITICAL)], weights) == 80


class TestAnalysisSettings:
    """Tests for threshold validation."""

    def test_negative_weight_rejected(self):
        """Given a negative severity weight, construction fails."""
        with pytest.raises(ValueError):
            AnalysisSettings(severity_weights={Severity.LOW: -1})

    def test_inverted_complexity_thresholds_rejected(self):
        """Given very-high below the normal complexity threshold, construction fails."""
        with pytest.raises(ValueError):
            AnalysisSettings(complexity_threshold=12, very_high_complexity_threshold=11)

    def test_severity_ordering(self):
        """Severities compare low < medium < high < critical."""
        assert Severity.LOW < Severity.MEDIUM < Severity.HIGH < Severity.CRITICAL
        assert max([Severity.MEDIUM, Severity.CRITICAL, Severity.LOW]) is Severity.CRITICAL
