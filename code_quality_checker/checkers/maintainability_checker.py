"""
Maintainability checks: design patterns, code smells, structural complexity,
testability and documentation.
"""

import re
from collections import Counter
from typing import List

from ..checker_base import BaseChecker
from ..issue import Category, Severity
from ..utils import indentation, scan_functions

CLASS_DECLARATION = re.compile(r"^\s*(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+\w+")
JS_METHOD = re.compile(
    r"\bfunction\s+\w+|^\s*(?:static\s+)?(?:async\s+)?(?:get\s+|set\s+)?(?!(?:if|for|while|switch|catch)\b)\w+\s*\([^;]*\)\s*\{"
)
PY_METHOD = re.compile(r"^\s*(?:async\s+)?def\s+\w+")
PROPERTY_ASSIGNMENT = re.compile(r"\b(?:this|self)\.(\w+)\s*=(?!=)")
NEW_OBJECT = re.compile(r"\bnew\s+\w+")
PARAMETER_LIST = re.compile(r"\b(?:function|def)\s+\w+\s*\(([^)]*)\)")
MAGIC_NUMBER = re.compile(r"(?<![\w.])(\d{2,})(?![\w.])")
CONSTANT_DEFINITION = re.compile(r"^\s*(?:(?:export\s+)?(?:const|final|static)\s+)*[A-Z][A-Z0-9_]*\s*[:=]")
MEMBER_CALL = re.compile(r"\w+\.\w+\(")
STATIC_CALL = re.compile(r"\b[A-Z]\w*\.\w+\(")
GLOBAL_STATE = ('window.', 'global.', 'globalThis.', 'process.env', 'os.environ')
CLOCK_CALLS = ('new Date()', 'Date.now()', 'datetime.now()', 'time.time()')
MODULE_DEPENDENCY = re.compile(r"\bfs\.|\brequire\(|\bimport\(|\bopen\(")
DOCUMENTED_DECLARATION = re.compile(r"^\s*(?:export\s+)?(?:async\s+)?(?:function\s+\w+|class\s+\w+|def\s+\w+)")
REGEX_LITERAL = re.compile(r"/(?:\\.|[^/\\\s])(?:\\.|[^/\\])*/[gimsuy]*")
PY_REGEX = re.compile(r"re\.(?:compile|match|search|findall|sub)\(\s*r?['\"]([^'\"]+)['\"]")
NOT_A_MAGIC_NUMBER = {100, 1000}


class MaintainabilityChecker(BaseChecker):
    """Design, smell, testability and documentation heuristics."""

    family = "maintainability"

    def _rules(self):
        return [
            self._check_design_patterns,
            self._check_code_smells,
            self._check_maintainability,
            self._check_testability,
            self._check_documentation,
        ]

    def _check_design_patterns(self):
        """God classes, singleton misuse, factory opportunities."""
        for i, line in enumerate(self.lines, 1):
            trimmed = line.strip()
            if not trimmed or self._is_comment(trimmed):
                continue
            index = i - 1

            if CLASS_DECLARATION.match(line):
                body = self._class_body(index)
                method_pattern = PY_METHOD if self.is_python else JS_METHOD
                methods = sum(1 for l in body if method_pattern.search(l))
                properties = {m for l in body for m in PROPERTY_ASSIGNMENT.findall(l)}
                if methods > self.settings.max_methods or len(properties) > self.settings.max_properties:
                    self._add_issue(
                        Category.SUGGESTION, Severity.HIGH, i,
                        "God class detected - class has too many responsibilities",
                        "Consider splitting this class into smaller, more focused classes",
                    )

            if 'Singleton' in trimmed and re.search(r"\bnew\s", trimmed):
                self._add_issue(
                    Category.BUG, Severity.MEDIUM, i,
                    "Potential singleton pattern misuse",
                    "Ensure singleton pattern is implemented correctly or consider dependency injection",
                )

            if re.search(r"\b(?:switch|if)\b", self._code(line)):
                following = self.lines[index:index + 10]
                created = sum(len(NEW_OBJECT.findall(self._code(l))) for l in following)
                if created > 3:
                    self._add_issue(
                        Category.SUGGESTION, Severity.MEDIUM, i,
                        "Consider using Factory pattern for object creation",
                        "Multiple object instantiations could benefit from a factory pattern",
                    )

    def _class_body(self, index: int) -> List[str]:
        """Lines of the class declared at 0-based `index`, header included."""
        if self.is_python:
            base = indentation(self.lines[index])
            body = [self.lines[index]]
            for line in self.lines[index + 1:]:
                if line.strip() and indentation(line) <= base:
                    break
                body.append(line)
            return body

        depth = 0
        opened = False
        for end in range(index, len(self.lines)):
            code = self._code(self.lines[end])
            depth += code.count('{') - code.count('}')
            opened = opened or '{' in code
            if opened and depth <= 0:
                return self.lines[index:end + 1]
        return self.lines[index:]

    def _check_code_smells(self):
        """Long parameter lists, duplication, magic numbers, feature envy, data clumps."""
        counts = Counter(l.strip() for l in self.lines)
        for i, line in enumerate(self.lines, 1):
            trimmed = line.strip()
            if not trimmed or self._is_comment(trimmed):
                continue
            code = self._code(line)

            m = PARAMETER_LIST.search(code)
            if m:
                params = [p.strip() for p in m.group(1).split(',') if p.strip()]
                if self.is_python:
                    params = [p for p in params if p not in ('self', 'cls')]
                if len(params) > self.settings.max_parameters:
                    self._add_issue(
                        Category.STYLE, Severity.MEDIUM, i,
                        f"Function has too many parameters ({len(params)})",
                        "Consider using an options object or splitting the function",
                    )

            if len(trimmed) > self.settings.duplicate_min_length and counts[trimmed] > 1:
                self._add_issue(
                    Category.SUGGESTION, Severity.LOW, i,
                    "Duplicate code detected",
                    "Consider extracting common code into a function or constant",
                )

            if not CONSTANT_DEFINITION.match(code):
                for literal in MAGIC_NUMBER.findall(code):
                    number = int(literal)
                    if number > 10 and number not in NOT_A_MAGIC_NUMBER:
                        self._add_issue(
                            Category.STYLE, Severity.LOW, i,
                            f"Magic number detected: {number}",
                            "Consider using a named constant for better readability",
                        )
                        break

            if len(MEMBER_CALL.findall(code)) > self.settings.max_member_calls:
                self._add_issue(
                    Category.SUGGESTION, Severity.LOW, i,
                    "Possible feature envy - too many calls to other objects",
                    "Consider moving this logic closer to the data it operates on",
                )

            if self.is_js and re.search(r"\bx\s*,\s*y\s*,\s*z\b", code):
                self._add_issue(
                    Category.SUGGESTION, Severity.LOW, i,
                    "Data clump detected (x, y, z parameters)",
                    "Consider creating a Point or Vector class",
                )

    def _check_maintainability(self):
        """Very complex functions, deep indentation, long methods."""
        very_high = self.settings.very_high_complexity_threshold
        for span in scan_functions(self.lines, self.language):
            if span.complexity > very_high:
                self._add_issue(
                    Category.SUGGESTION, Severity.HIGH, span.start_line,
                    f"Very high cyclomatic complexity ({span.complexity})",
                    "This function is very complex and hard to maintain. Consider refactoring.",
                )
            if span.length > self.settings.max_function_length:
                self._add_issue(
                    Category.SUGGESTION, Severity.MEDIUM, span.start_line,
                    f"Long method detected ({span.length} lines)",
                    "Consider breaking this method into smaller, more focused methods",
                )

        for i, line in enumerate(self.lines, 1):
            if not line.strip():
                continue
            if indentation(line.expandtabs(4)) > self.settings.max_indent:
                self._add_issue(
                    Category.STYLE, Severity.MEDIUM, i,
                    "Deep nesting detected",
                    "Consider extracting nested logic into separate functions",
                )

    def _check_testability(self):
        """Static calls, global state, clocks, randomness, hard module dependencies."""
        has_test_seams = 'mock' in self.code or 'test' in self.code
        for i, line in enumerate(self.lines, 1):
            trimmed = line.strip()
            if not trimmed or self._is_comment(trimmed):
                continue
            code = self._code(line)

            if STATIC_CALL.search(code):
                self._add_issue(
                    Category.SUGGESTION, Severity.LOW, i,
                    "Static method call detected - may be hard to test",
                    "Consider dependency injection for better testability",
                )

            if any(marker in code for marker in GLOBAL_STATE):
                self._add_issue(
                    Category.SUGGESTION, Severity.MEDIUM, i,
                    "Global state access detected",
                    "Consider passing dependencies as parameters for better testability",
                )

            if any(call in code for call in CLOCK_CALLS):
                self._add_issue(
                    Category.SUGGESTION, Severity.LOW, i,
                    "Direct date/time dependency",
                    "Consider injecting a time provider for better testability",
                )

            if 'Math.random()' in code:
                self._add_issue(
                    Category.SUGGESTION, Severity.LOW, i,
                    "Random number generation affects testability",
                    "Consider injecting a random number generator for deterministic tests",
                )

            if MODULE_DEPENDENCY.search(code) and not has_test_seams:
                self._add_issue(
                    Category.SUGGESTION, Severity.LOW, i,
                    "File system or module dependency",
                    "Consider using dependency injection for better testability",
                )

    def _check_documentation(self):
        """Undocumented declarations, unexplained regexes, vague TODOs."""
        for i, line in enumerate(self.lines, 1):
            trimmed = line.strip()
            if not trimmed:
                continue
            index = i - 1
            prev = self.lines[index - 1].strip() if index > 0 else ''

            if DOCUMENTED_DECLARATION.match(line) and not self._has_doc(index, prev):
                self._add_issue(
                    Category.SUGGESTION, Severity.LOW, i,
                    "Public function/class without documentation",
                    "Consider adding a doc comment to improve code documentation",
                )

            if not self._is_comment(trimmed):
                pattern = self._regex_literal(trimmed)
                if pattern and len(pattern) > 20 and '//' not in prev and not prev.startswith('#'):
                    self._add_issue(
                        Category.SUGGESTION, Severity.LOW, i,
                        "Complex regular expression without explanation",
                        "Add a comment explaining what this regex does",
                    )

            if ('TODO' in trimmed or 'FIXME' in trimmed) and len(trimmed) < 20:
                self._add_issue(
                    Category.SUGGESTION, Severity.LOW, i,
                    "TODO/FIXME without sufficient context",
                    "Provide more details about what needs to be done",
                )

    def _has_doc(self, index: int, prev: str) -> bool:
        if prev.startswith(('/**', '*', '//', '#', '@')) or prev.endswith('*/'):
            return True
        if self.is_python and index + 1 < len(self.lines):
            following = self.lines[index + 1].strip()
            return following.startswith(('"""', "'''", 'r"""'))
        return False

    def _regex_literal(self, trimmed: str) -> str:
        if self.is_python:
            m = PY_REGEX.search(trimmed)
            return m.group(1) if m else ''
        if '\\' not in trimmed:
            return ''
        m = REGEX_LITERAL.search(trimmed)
        return m.group(0) if m else ''
