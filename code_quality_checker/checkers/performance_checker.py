"""
Performance checks.

Loop context comes from two approximations: the loop nesting counter from
`loop_depths()` and keyword co-occurrence inside a bounded window of preceding
lines. Neither is data-flow analysis.
"""

import re

from ..checker_base import BaseChecker
from ..issue import Category, Severity
from ..utils import LOOP_KEYWORD, loop_depths, window_has_loop

LINEAR_LOOKUP = re.compile(r"\.(?:indexOf|includes|lastIndexOf)\(|\.index\(")
FRONT_REMOVAL = re.compile(r"\.splice\(\s*0|\.shift\(\)|\.pop\(\s*0\s*\)")
LARGE_ARRAY = re.compile(r"new Array\(\s*(\d+)")
PROMISE_MARKERS = ('.then(', 'Promise.', 'fetch(', 'setTimeout(')
BLOCKING_CALLS = re.compile(r"\b(?:readFileSync|writeFileSync|execSync|spawnSync)\b|\btime\.sleep\(")
CALLBACK = re.compile(r"function\s*\(")
DOM_QUERY = ('document.querySelector', 'getElementById', 'getElementsBy')
LAYOUT_READS = ('offsetHeight', 'offsetWidth', 'scrollTop', 'getComputedStyle')
DB_QUERY = re.compile(r"\bSELECT\b|\.find(?:One|All|ById|Many)?\(|\.objects\.(?:get|filter)\(")
WHERE_EQUALS = re.compile(r"WHERE\s+(\w+)\s*=")


class PerformanceChecker(BaseChecker):
    """Algorithmic, memory, async, DOM and database performance heuristics."""

    family = "performance"

    def _rules(self):
        return [
            self._check_algorithmic_complexity,
            self._check_memory_usage,
            self._check_async_patterns,
            self._check_dom_operations,
            self._check_database_queries,
        ]

    def _check_algorithmic_complexity(self):
        """Nested loops and O(n) operations repeated inside loops."""
        depths = loop_depths(self.lines, self.language)
        file_has_loop = any(LOOP_KEYWORD.search(line) for line in self.lines)
        for i, line in enumerate(self.lines, 1):
            trimmed = line.strip()
            depth = depths[i - 1]
            if not trimmed or self._is_comment(trimmed):
                continue

            if depth > self.settings.max_loop_depth and LOOP_KEYWORD.search(self._code(line)):
                self._add_issue(
                    Category.PERFORMANCE, Severity.HIGH, i,
                    f"Deep nested loops detected (depth: {depth})",
                    "Consider optimizing algorithm complexity or using more efficient data structures",
                )

            if LINEAR_LOOKUP.search(trimmed) and depth > 0:
                self._add_issue(
                    Category.PERFORMANCE, Severity.MEDIUM, i,
                    "Linear lookup (indexOf/includes) inside loop can be O(n²)",
                    "Consider using Set or Map for O(1) lookups",
                )

            if FRONT_REMOVAL.search(trimmed) and (depth > 0 or file_has_loop):
                self._add_issue(
                    Category.PERFORMANCE, Severity.MEDIUM, i,
                    "Removing from the front of an array in a loop is inefficient",
                    "Consider using a queue data structure or reversing iteration",
                )

            if ('.sort(' in trimmed or 'sorted(' in trimmed) and depth > 0:
                self._add_issue(
                    Category.PERFORMANCE, Severity.HIGH, i,
                    "Sorting inside loop is inefficient",
                    "Move sorting outside of loop or use more efficient algorithms",
                )

    def _check_memory_usage(self):
        """Large allocations, leaked listeners/timers, loop-local allocations."""
        for i, line in enumerate(self.lines, 1):
            trimmed = line.strip()
            if not trimmed:
                continue
            index = i - 1

            m = LARGE_ARRAY.search(trimmed)
            if m and int(m.group(1)) >= self.settings.large_array_size:
                self._add_issue(
                    Category.PERFORMANCE, Severity.MEDIUM, i,
                    "Creating large array may cause memory issues",
                    "Consider using streams or processing data in chunks",
                )

            if 'addEventListener' in trimmed and 'removeEventListener' not in self.code:
                self._add_issue(
                    Category.PERFORMANCE, Severity.MEDIUM, i,
                    "Potential memory leak - event listener without removal",
                    "Add corresponding removeEventListener() call",
                )

            if 'setInterval' in trimmed and 'clearInterval' not in self.code:
                self._add_issue(
                    Category.PERFORMANCE, Severity.HIGH, i,
                    "Potential memory leak - setInterval without clearInterval",
                    "Add clearInterval() call to clean up timer",
                )

            if '+=' in trimmed and ('"' in trimmed or "'" in trimmed or '`' in trimmed):
                if window_has_loop(self.lines, index, self.settings.concat_window):
                    self._add_issue(
                        Category.PERFORMANCE, Severity.MEDIUM, i,
                        "String concatenation in loop is inefficient",
                        "Collect parts in a list/array and join them once",
                    )

            if 'function(' in trimmed or '=>' in trimmed or 'lambda ' in trimmed:
                if window_has_loop(self.lines, index, self.settings.loop_window):
                    self._add_issue(
                        Category.PERFORMANCE, Severity.LOW, i,
                        "Creating functions inside loops can impact performance",
                        "Define functions outside of loops when possible",
                    )

    def _check_async_patterns(self):
        """Unawaited promises, sequential awaits, blocking calls, callback nesting."""
        for i, line in enumerate(self.lines, 1):
            trimmed = line.strip()
            if not trimmed:
                continue
            index = i - 1

            if re.search(r"\basync\s+(?:function|def)\b", trimmed) or re.search(r"\basync\s*\(", trimmed):
                body = self.lines[index:index + self.settings.async_window]
                has_promises = any(marker in l for l in body for marker in PROMISE_MARKERS)
                has_await = any('await' in l for l in body)
                if has_promises and not has_await:
                    self._add_issue(
                        Category.PERFORMANCE, Severity.MEDIUM, i,
                        "Async function with Promises but no await - potential missed optimization",
                        "Use await for better error handling and readability",
                    )

            if 'await' in trimmed and 'Promise.all' not in trimmed and 'gather(' not in trimmed:
                following = self.lines[index + 1:index + 3]
                if len(following) == 2 and all('await' in l for l in following):
                    self._add_issue(
                        Category.PERFORMANCE, Severity.MEDIUM, i,
                        "Sequential await operations - consider parallel execution",
                        "Use Promise.all() / asyncio.gather() for independent async operations",
                    )

            if BLOCKING_CALLS.search(trimmed):
                before = self.lines[max(0, index - self.settings.blocking_window):index]
                if any('async' in l for l in before):
                    self._add_issue(
                        Category.PERFORMANCE, Severity.HIGH, i,
                        "Synchronous operation in async function blocks event loop",
                        "Use the async variant of the call with await",
                    )

            if len(CALLBACK.findall(trimmed)) > 2:
                self._add_issue(
                    Category.PERFORMANCE, Severity.MEDIUM, i,
                    "Deep callback nesting detected",
                    "Consider using Promises or async/await for better readability",
                )

    def _check_dom_operations(self):
        """Layout thrashing and repeated DOM work (JavaScript only)."""
        if not self.is_js:
            return
        window = self.settings.loop_window
        for i, line in enumerate(self.lines, 1):
            trimmed = line.strip()
            if not trimmed:
                continue
            index = i - 1

            if any(q in trimmed for q in DOM_QUERY) and window_has_loop(self.lines, index, window):
                self._add_issue(
                    Category.PERFORMANCE, Severity.MEDIUM, i,
                    "DOM query inside loop is expensive",
                    "Cache DOM elements outside of loops",
                )

            if any(prop in trimmed for prop in LAYOUT_READS):
                self._add_issue(
                    Category.PERFORMANCE, Severity.LOW, i,
                    "Property access that triggers layout recalculation",
                    "Batch DOM reads and writes to minimize reflows",
                )

            if ('.style.' in trimmed or '.classList.' in trimmed) and window_has_loop(self.lines, index, window):
                self._add_issue(
                    Category.PERFORMANCE, Severity.MEDIUM, i,
                    "DOM style manipulation inside loop causes multiple repaints",
                    "Use CSS classes or batch style changes",
                )

            if 'innerHTML' in trimmed and '+=' in trimmed:
                self._add_issue(
                    Category.PERFORMANCE, Severity.HIGH, i,
                    "innerHTML concatenation is inefficient",
                    "Use DocumentFragment or build string first, then set innerHTML once",
                )

    def _check_database_queries(self):
        """N+1 queries, unbounded and unindexed queries."""
        for i, line in enumerate(self.lines, 1):
            trimmed = line.strip()
            if not trimmed:
                continue
            index = i - 1

            if DB_QUERY.search(trimmed) and window_has_loop(self.lines, index, self.settings.loop_window):
                self._add_issue(
                    Category.PERFORMANCE, Severity.HIGH, i,
                    "Potential N+1 query problem - database query inside loop",
                    "Use joins, includes, or bulk operations to reduce database calls",
                )

            if 'INDEX' not in trimmed and WHERE_EQUALS.search(trimmed):
                self._add_issue(
                    Category.PERFORMANCE, Severity.MEDIUM, i,
                    "Query without explicit index usage",
                    "Ensure proper database indexes exist for query performance",
                )

            if 'SELECT *' in trimmed:
                self._add_issue(
                    Category.PERFORMANCE, Severity.LOW, i,
                    "SELECT * queries fetch unnecessary data",
                    "Specify only required columns in SELECT statement",
                )

            if re.search(r"\bSELECT\b", trimmed) and 'LIMIT' not in trimmed and 'TOP' not in trimmed:
                self._add_issue(
                    Category.PERFORMANCE, Severity.MEDIUM, i,
                    "Query without LIMIT may return excessive data",
                    "Add LIMIT clause to prevent large result sets",
                )
