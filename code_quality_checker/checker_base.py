"""
Base checker class for detector families.
"""

import logging
from typing import Callable, List, Optional

from .issue import Category, Issue, RuleFailure, Severity
from .settings import DEFAULT_SETTINGS, AnalysisSettings
from .utils import code_part, is_comment, is_js_like, normalize_language, split_lines

logger = logging.getLogger(__name__)


class BaseChecker:
    """Base class for all detector families.

    One instance serves one `check()` call at a time; the engine builds fresh
    instances per analysis so no state leaks between invocations.
    """

    family = "base"

    def __init__(self, settings: Optional[AnalysisSettings] = None):
        self.settings = settings or DEFAULT_SETTINGS
        self.issues: List[Issue] = []
        self.failures: List[RuleFailure] = []
        self.code: str = ""
        self.language: str = ""
        self.lines: List[str] = []

    def check(self, code: str, language: str) -> List[Issue]:
        """Run every rule of this family and return the concatenated issues.

        A rule that raises loses whatever it reported so far and is recorded in
        `self.failures`; the other rules still run.
        """
        self.code = code or ""
        self.language = normalize_language(language)
        self.lines = split_lines(self.code)
        self.issues = []
        self.failures = []
        for rule in self._rules():
            mark = len(self.issues)
            try:
                rule()
            except Exception as e:
                del self.issues[mark:]
                name = getattr(rule, "__name__", repr(rule))
                logger.warning("Rule %s.%s failed: %s", self.family, name, e)
                self.failures.append(RuleFailure(self.family, name, f"{type(e).__name__}: {e}"))
        return list(self.issues)

    def _rules(self) -> List[Callable[[], None]]:
        """Override in subclasses to list the rule methods to run, in order."""
        return []

    def _add_issue(
        self,
        category: Category,
        severity: Severity,
        line_num: Optional[int],
        message: str,
        suggestion: Optional[str] = None,
    ):
        """Add an issue to the list."""
        self.issues.append(Issue(category, severity, message, line_num, suggestion))

    def _is_comment(self, line: str) -> bool:
        """Check if line is a comment."""
        return is_comment(line)

    def _code(self, line: str) -> str:
        """Line without string contents or trailing comment."""
        return code_part(line, self.language)

    @property
    def is_js(self) -> bool:
        return is_js_like(self.language)

    @property
    def is_python(self) -> bool:
        return self.language == "python"
