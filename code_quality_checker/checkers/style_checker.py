"""
Lexical and style checks: syntax habits, naming, complexity and best practices.
"""

import re

from ..checker_base import BaseChecker
from ..issue import Category, Severity
from ..utils import scan_functions

JS_DECLARATION = re.compile(r"\b(?:var|let|const)\s+([A-Za-z_$][\w$]*)")
JS_FUNCTION_NAME = re.compile(r"\bfunction\s+(\w+)")
PY_FUNCTION_NAME = re.compile(r"^\s*(?:async\s+)?def\s+(\w+)")
PY_ASSIGNMENT = re.compile(r"^\s*([A-Za-z_]\w*)\s*=(?!=)")
CAMEL_CASE = re.compile(r"^[a-z][a-zA-Z0-9]*$")
SNAKE_CASE = re.compile(r"^_{0,2}[a-z][a-z0-9_]*_{0,2}$")
LOOSE_EQUALITY = re.compile(r"(?<![=!<>])==(?!=)|!=(?!=)")
SHORT_NAME_ALLOWED = {'i', 'j', 'k', 'x', 'y', 'z', '_', 'e', 'id', 'db', 'ok', 'fn', 'el'}
STATEMENT_ENDINGS = (';', '{', '}', ',', '(', '[', '=>', ':')


class StyleChecker(BaseChecker):
    """Style and readability heuristics."""

    family = "style"

    def _rules(self):
        return [
            self._check_syntax,
            self._check_naming,
            self._check_complexity,
            self._check_best_practices,
        ]

    def _check_syntax(self):
        """Semicolons, unused declarations, long lines, TODO markers."""
        for i, line in enumerate(self.lines, 1):
            trimmed = line.strip()

            if self.is_js and trimmed and not self._is_comment(trimmed):
                if not trimmed.endswith(STATEMENT_ENDINGS):
                    self._add_issue(
                        Category.STYLE, Severity.LOW, i,
                        "Missing semicolon",
                        "Add semicolon at the end of the statement",
                    )

                m = JS_DECLARATION.search(self._code(line))
                if m:
                    name = m.group(1)
                    rest = "\n".join(self.lines[i:])
                    if not re.search(r"(?<![\w$])" + re.escape(name) + r"(?![\w$])", rest):
                        self._add_issue(
                            Category.STYLE, Severity.MEDIUM, i,
                            f"Potentially unused variable: {name}",
                            "Remove unused variable or use it in the code",
                        )

            if len(line) > self.settings.max_line_length:
                self._add_issue(
                    Category.STYLE, Severity.LOW, i,
                    f"Line too long (over {self.settings.max_line_length} characters)",
                    "Break long lines into multiple lines for better readability",
                )

            if 'TODO' in trimmed or 'FIXME' in trimmed:
                self._add_issue(
                    Category.SUGGESTION, Severity.LOW, i,
                    "TODO/FIXME comment found",
                    "Address the TODO/FIXME comment",
                )

    def _check_naming(self):
        """Function naming conventions and overly short variable names."""
        for i, line in enumerate(self.lines, 1):
            if self._is_comment(line):
                continue
            code = self._code(line)

            if self.is_js:
                m = JS_FUNCTION_NAME.search(code)
                if m and not CAMEL_CASE.match(m.group(1)):
                    self._add_issue(
                        Category.STYLE, Severity.MEDIUM, i,
                        f"Function name '{m.group(1)}' should be camelCase",
                        "Use camelCase naming convention for functions",
                    )
                m = JS_DECLARATION.search(code)
                if m:
                    self._check_short_name(i, m.group(1))

            elif self.is_python:
                m = PY_FUNCTION_NAME.match(code)
                if m and not SNAKE_CASE.match(m.group(1)):
                    self._add_issue(
                        Category.STYLE, Severity.MEDIUM, i,
                        f"Function name '{m.group(1)}' should be snake_case",
                        "Use snake_case naming convention for functions (PEP 8)",
                    )
                m = PY_ASSIGNMENT.match(code)
                if m:
                    self._check_short_name(i, m.group(1))

    def _check_short_name(self, line_num: int, name: str):
        if len(name) < self.settings.min_identifier_length and name not in SHORT_NAME_ALLOWED:
            self._add_issue(
                Category.STYLE, Severity.LOW, line_num,
                f"Variable name '{name}' is too short",
                "Use descriptive variable names",
            )

    def _check_complexity(self):
        """Cyclomatic complexity per detected function."""
        limit = self.settings.complexity_threshold
        very_high = self.settings.very_high_complexity_threshold
        for span in scan_functions(self.lines, self.language):
            if span.complexity > limit:
                severity = Severity.HIGH if span.complexity > very_high else Severity.MEDIUM
                self._add_issue(
                    Category.SUGGESTION, severity, span.start_line,
                    f"Function has high cyclomatic complexity ({span.complexity})",
                    "Consider breaking down the function into smaller functions",
                )

    def _check_best_practices(self):
        """Debug output, loose equality, var, unguarded JSON.parse, bare except."""
        guarded = 'try' in self.code and 'catch' in self.code
        for i, line in enumerate(self.lines, 1):
            trimmed = line.strip()
            if not trimmed or self._is_comment(trimmed):
                continue
            code = self._code(line)

            if self.is_js:
                if 'console.log' in code:
                    self._add_issue(
                        Category.SUGGESTION, Severity.LOW, i,
                        "console.log found - should be removed in production",
                        "Use proper logging library or remove debug statements",
                    )

                if LOOSE_EQUALITY.search(code):
                    self._add_issue(
                        Category.BUG, Severity.MEDIUM, i,
                        "Use strict equality (===) instead of loose equality (==)",
                        "Replace == with === (and != with !==) for strict comparison",
                    )

                if re.search(r"\bvar\s", code):
                    self._add_issue(
                        Category.STYLE, Severity.MEDIUM, i,
                        "Use let or const instead of var",
                        "Replace var with let (for mutable) or const (for immutable) variables",
                    )

                if 'JSON.parse' in code and not guarded:
                    self._add_issue(
                        Category.BUG, Severity.HIGH, i,
                        "JSON.parse without error handling",
                        "Wrap JSON.parse in try-catch block",
                    )

            elif self.is_python:
                if re.match(r"print\s*\(", trimmed):
                    self._add_issue(
                        Category.SUGGESTION, Severity.LOW, i,
                        "print() found - should be removed in production",
                        "Use the logging module or remove debug statements",
                    )

                if re.match(r"except\s*:", trimmed):
                    self._add_issue(
                        Category.BUG, Severity.MEDIUM, i,
                        "Bare except clause catches every exception",
                        "Catch specific exception types",
                    )
