"""Tests for the four detector families and the line-scan helpers.

Following the same conventions as the rest of the suite:
- Given-When-Then structure
- Assertions on observable findings, not on rule internals
"""

from code_quality_checker.checkers import (
    MaintainabilityChecker,
    PerformanceChecker,
    SecurityChecker,
    StyleChecker,
)
from code_quality_checker.issue import Category, Severity
from code_quality_checker.utils import (
    detect_language,
    loop_depths,
    normalize_language,
    scan_functions,
)


def _find(issues, text, category=None, severity=None, line=None):
    return [
        i for i in issues
        if text in i.message
        and (category is None or i.category is category)
        and (severity is None or i.severity is severity)
        and (line is None or i.line == line)
    ]


SCENARIO = "const x = 5\nconsole.log(x)\nvar y = eval(x)"


class TestSecurityChecker:
    """Tests for SecurityChecker."""

    def test_sql_concatenation_is_critical(self):
        """Given a query built by concatenation, should report critical SQL injection."""
        code = 'const rows = db.query("SELECT * FROM users WHERE id = " + userId);'

        issues = SecurityChecker().check(code, "javascript")

        assert _find(issues, "SQL injection", Category.SECURITY, Severity.CRITICAL, line=1)

    def test_weak_hash_is_high(self):
        """Given md5 usage, should report a weak hashing algorithm."""
        code = "const digest = crypto.createHash('md5').update(data).digest('hex');"

        issues = SecurityChecker().check(code, "javascript")

        assert _find(issues, "Weak hashing", Category.SECURITY, Severity.HIGH)

    def test_hard_coded_secret_reported_once_per_line(self):
        """Given two secret patterns on one line, should report exactly one finding."""
        code = 'const config = { apiKey: "abc123", token: "def456" };'

        issues = SecurityChecker().check(code, "javascript")

        secrets = _find(issues, "Hard-coded secret", Category.SECURITY, Severity.CRITICAL)
        assert len(secrets) == 1

    def test_eval_inside_string_or_longer_name_ignored(self):
        """Given 'eval' only in a string literal and in evaluate(), should not report eval."""
        code = 'const label = "eval(x) is dangerous";\nconst score = evaluate(input);'

        issues = SecurityChecker().check(code, "javascript")

        assert not _find(issues, "eval()")

    def test_python_eval_and_pickle(self):
        """Given Python code importing pickle and calling eval, should report both."""
        code = "import pickle\nresult = eval(user_input)"

        issues = SecurityChecker().check(code, "python")

        assert _find(issues, "dangerous module: pickle", Category.SECURITY, Severity.HIGH, line=1)
        assert _find(issues, "eval()", Category.SECURITY, Severity.CRITICAL, line=2)


class TestPerformanceChecker:
    """Tests for PerformanceChecker."""

    def test_triple_nested_loop_is_high(self):
        """Given three nested loops, should report the innermost loop."""
        code = "\n".join([
            "for (let i = 0; i < n; i++) {",
            "  for (let j = 0; j < n; j++) {",
            "    for (let k = 0; k < n; k++) {",
            "      total += i * j * k;",
            "    }",
            "  }",
            "}",
        ])

        issues = PerformanceChecker().check(code, "javascript")

        nested = _find(issues, "Deep nested loops", Category.PERFORMANCE, Severity.HIGH)
        assert [i.line for i in nested] == [3]

    def test_double_nested_loop_not_reported(self):
        """Given two nested loops, should not report deep nesting."""
        code = "\n".join([
            "for (let i = 0; i < n; i++) {",
            "  for (let j = 0; j < n; j++) {",
            "    total += i * j;",
            "  }",
            "}",
        ])

        issues = PerformanceChecker().check(code, "javascript")

        assert not _find(issues, "Deep nested loops")

    def test_index_of_inside_loop(self):
        """Given indexOf inside a loop body, should report a linear lookup."""
        code = "\n".join([
            "for (const item of items) {",
            "  if (seen.indexOf(item) === -1) {",
            "    seen.push(item);",
            "  }",
            "}",
        ])

        issues = PerformanceChecker().check(code, "javascript")

        assert _find(issues, "Linear lookup", Category.PERFORMANCE, Severity.MEDIUM, line=2)

    def test_set_interval_without_clear(self):
        """Given setInterval with no clearInterval in the file, should report a leak."""
        issues = PerformanceChecker().check("const timer = setInterval(poll, 500);", "javascript")

        assert _find(issues, "setInterval without clearInterval", Category.PERFORMANCE, Severity.HIGH)


class TestStyleChecker:
    """Tests for StyleChecker."""

    def test_javascript_scenario(self):
        """Given the reference snippet, should report semicolon, console, var."""
        issues = StyleChecker().check(SCENARIO, "javascript")

        assert _find(issues, "Missing semicolon", Category.STYLE, Severity.LOW, line=1)
        assert _find(issues, "console.log", Category.SUGGESTION, Severity.LOW, line=2)
        assert _find(issues, "let or const instead of var", Category.STYLE, Severity.MEDIUM, line=3)

    def test_used_variable_not_reported_as_unused(self):
        """Given x used on a later line and y never used, only y is flagged."""
        issues = StyleChecker().check(SCENARIO, "javascript")

        assert not _find(issues, "unused variable: x")
        assert _find(issues, "unused variable: y", Category.STYLE, Severity.MEDIUM, line=3)

    def test_python_function_name_must_be_snake_case(self):
        """Given a camelCase def, should report a naming issue."""
        issues = StyleChecker().check("def getValue():\n    return 1", "python")

        assert _find(issues, "should be snake_case", Category.STYLE, Severity.MEDIUM, line=1)

    def test_python_bare_except(self):
        """Given a bare except clause, should report a bug."""
        code = "try:\n    run()\nexcept:\n    pass"

        issues = StyleChecker().check(code, "python")

        assert _find(issues, "Bare except", Category.BUG, Severity.MEDIUM, line=3)

    def test_complexity_above_ten_is_medium(self):
        """Given a function with complexity 12, should suggest splitting it (medium)."""
        body = "\n".join(f"  if (a === {n}) return {n};" for n in range(11))
        code = "function check(a) {\n" + body + "\n  return 0;\n}"

        issues = StyleChecker().check(code, "javascript")

        found = _find(issues, "cyclomatic complexity (12)", Category.SUGGESTION, Severity.MEDIUM, line=1)
        assert len(found) == 1

    def test_complexity_above_fifteen_is_high(self):
        """Given a function with complexity 17, the suggestion is high."""
        body = "\n".join(f"  if (a === {n}) return {n};" for n in range(16))
        code = "function check(a) {\n" + body + "\n  return 0;\n}"

        issues = StyleChecker().check(code, "javascript")

        assert _find(issues, "cyclomatic complexity (17)", Category.SUGGESTION, Severity.HIGH, line=1)

    def test_long_line(self):
        """Given a line over 100 characters, should report it."""
        code = "const s = '" + "a" * 120 + "';"

        issues = StyleChecker().check(code, "javascript")

        assert _find(issues, "Line too long", Category.STYLE, Severity.LOW, line=1)


class TestMaintainabilityChecker:
    """Tests for MaintainabilityChecker."""

    def test_long_parameter_list(self):
        """Given six parameters, should report too many parameters."""
        code = "function build(a, b, c, d, e, f) {\n  return a;\n}"

        issues = MaintainabilityChecker().check(code, "javascript")

        assert _find(issues, "too many parameters (6)", Category.STYLE, Severity.MEDIUM, line=1)

    def test_magic_number_but_not_named_constant(self):
        """Given 42 inline and in a named constant, only the inline use is flagged."""
        code = "const MAX_RETRIES = 42;\nconst timeout = delay * 42;"

        issues = MaintainabilityChecker().check(code, "javascript")

        magic = _find(issues, "Magic number detected: 42")
        assert [i.line for i in magic] == [2]

    def test_duplicate_lines(self):
        """Given the same long line twice, both occurrences are reported."""
        code = "const result = computeTotal(order);\nconst result = computeTotal(order);"

        issues = MaintainabilityChecker().check(code, "javascript")

        assert [i.line for i in _find(issues, "Duplicate code")] == [1, 2]

    def test_god_class_in_python(self):
        """Given a class with sixteen methods, should report a god class."""
        methods = "\n".join(f"    def m{n}(self):\n        pass" for n in range(16))
        code = "class Manager:\n" + methods

        issues = MaintainabilityChecker().check(code, "python")

        assert _find(issues, "God class", Category.SUGGESTION, Severity.HIGH, line=1)

    def test_long_method(self):
        """Given a function body over 50 lines, should report a long method."""
        body = "\n".join(f"  step{n}();" for n in range(55))
        code = "function run() {\n" + body + "\n}"

        issues = MaintainabilityChecker().check(code, "javascript")

        assert _find(issues, "Long method detected", Category.SUGGESTION, Severity.MEDIUM, line=1)

    def test_direct_clock_dependency(self):
        """Given Date.now(), should report a testability issue."""
        issues = MaintainabilityChecker().check("const now = Date.now();", "javascript")

        assert _find(issues, "Direct date/time dependency", Category.SUGGESTION, Severity.LOW)


class TestRuleIsolation:
    """A failing rule must not take the rest of its family down."""

    def test_failing_rule_is_recorded_and_others_still_run(self):
        """Given a rule that reports then raises, its partial output is dropped."""
        # Given
        class BrokenStyleChecker(StyleChecker):
            def _rules(self):
                return [self._explode] + super()._rules()

            def _explode(self):
                self._add_issue(Category.BUG, Severity.CRITICAL, 1, "partial output")
                raise RuntimeError("boom")

        checker = BrokenStyleChecker()

        # When
        issues = checker.check(SCENARIO, "javascript")

        # Then
        assert not _find(issues, "partial output")
        assert _find(issues, "let or const instead of var")
        assert len(checker.failures) == 1
        failure = checker.failures[0]
        assert failure.family == "style"
        assert failure.rule == "_explode"
        assert failure.error == "RuntimeError: boom"


class TestLineScanHelpers:
    """Tests for the helpers in utils."""

    def test_detect_language(self):
        assert detect_language("src/App.tsx") == "typescript"
        assert detect_language("main.py") == "python"
        assert detect_language("README.unknownext") == "unknown"

    def test_normalize_language_aliases(self):
        assert normalize_language("JS") == "javascript"
        assert normalize_language(" py ") == "python"
        assert normalize_language(None) == ""

    def test_python_loop_depths(self):
        """Given nested for statements and a comprehension, depths count each level."""
        lines = [
            "for a in xs:",
            "    for b in ys:",
            "        total = [c for c in b]",
        ]

        assert loop_depths(lines, "python") == [1, 2, 3]

    def test_python_function_complexity(self):
        """Given a def with if/and/for, complexity is 1 + 3."""
        lines = [
            "def f(x):",
            "    if x and x > 1:",
            "        return 1",
            "    for i in range(x):",
            "        pass",
            "    return 0",
        ]

        spans = scan_functions(lines, "python")

        assert len(spans) == 1
        assert (spans[0].start_line, spans[0].end_line, spans[0].complexity) == (1, 6, 4)
