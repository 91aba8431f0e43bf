"""
Utility functions for the code quality checker.

Everything here is line oriented: no parser, only per-line regexes plus small
counters (brace depth, indentation, loop nesting) kept for one scan.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

JS_LANGUAGES = ("javascript", "typescript")

_LANGUAGE_ALIASES = {
    "js": "javascript",
    "jsx": "javascript",
    "node": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "py": "python",
    "python3": "python",
    "c++": "cpp",
    "cs": "csharp",
    "c#": "csharp",
    "rs": "rust",
    "golang": "go",
}

_LANG_MAP = {
    '.js': 'javascript',
    '.jsx': 'javascript',
    '.mjs': 'javascript',
    '.cjs': 'javascript',
    '.vue': 'javascript',
    '.svelte': 'javascript',
    '.ts': 'typescript',
    '.tsx': 'typescript',
    '.py': 'python',
    '.java': 'java',
    '.kt': 'kotlin',
    '.scala': 'scala',
    '.cpp': 'cpp',
    '.cxx': 'cpp',
    '.cc': 'cpp',
    '.hpp': 'cpp',
    '.c': 'c',
    '.h': 'c',
    '.cs': 'csharp',
    '.go': 'go',
    '.rs': 'rust',
    '.php': 'php',
    '.rb': 'ruby',
    '.swift': 'swift',
    '.html': 'html',
    '.css': 'css',
    '.json': 'json',
    '.yaml': 'yaml',
    '.yml': 'yaml',
    '.xml': 'xml',
}

# Files the realtime pipeline is willing to analyze.
CODE_EXTENSIONS = frozenset(_LANG_MAP)

SUPPORTED_LANGUAGES = (
    'javascript', 'typescript', 'python', 'java', 'cpp', 'c',
    'go', 'rust', 'php', 'ruby', 'swift', 'kotlin',
)

LOOP_KEYWORD = re.compile(r"\b(?:for|while)\b|\.forEach\s*\(|\bdo\s*\{")
_PY_LOOP_STATEMENT = re.compile(r"^\s*(?:async\s+)?(?:for|while)\b")
_PY_DEF = re.compile(r"^\s*(?:async\s+)?def\s+(\w+)")

_BRANCH_TOKENS = re.compile(r"\b(?:if|for|while|do|switch|case|catch)\b|&&|\|\||\?(?![.?:])")
_PY_BRANCH_TOKENS = re.compile(r"\b(?:if|elif|for|while|except|and|or|case)\b")

_STRING_LITERAL = re.compile(r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'|`(?:\\.|[^`\\])*`')

_FUNCTION_MARKER = re.compile(r"\bfunction\b|=>|\bfunc\b|\bfn\b")
_CONTROL_WORDS = {"if", "for", "while", "switch", "catch", "return", "else", "new", "do", "with", "foreach", "using", "lock"}
_METHOD_SIGNATURE = re.compile(
    r"^\s*(?:(?:public|private|protected|internal|static|final|async|override|virtual|abstract|"
    r"synchronized|inline|const|get|set)\s+)*(?:[\w<>\[\],.*&:?]+\s+)?\*?&?(\w+)\s*\([^;]*\)\s*"
    r"(?:const\s*)?(?:throws\s+[\w.,\s]+)?(?::\s*[\w<>\[\],.|? ]+)?\s*\{\s*$"
)


def normalize_language(language: Optional[str]) -> str:
    """Lowercase a language hint and resolve common aliases (js -> javascript)."""
    lang = (language or "").strip().lower()
    return _LANGUAGE_ALIASES.get(lang, lang)


def is_js_like(language: str) -> bool:
    return language in JS_LANGUAGES


def detect_language(file_path: Union[str, Path]) -> str:
    """Detect programming language from file extension."""
    ext = Path(file_path).suffix.lower()
    return _LANG_MAP.get(ext, 'unknown')


def is_code_file(file_path: Union[str, Path]) -> bool:
    return Path(file_path).suffix.lower() in CODE_EXTENSIONS


def split_lines(code: str) -> List[str]:
    """Split source into lines, tolerating CRLF."""
    return [line.rstrip("\r") for line in (code or "").split("\n")]


def is_comment(line: str) -> bool:
    """Check if line is a comment."""
    stripped = line.strip()
    comment_prefixes = ['#', '//', '/*', '*']
    return any(stripped.startswith(prefix) for prefix in comment_prefixes)


def strip_strings(line: str) -> str:
    """Blank out the contents of quoted string literals on one line."""
    return _STRING_LITERAL.sub('""', line)


def code_part(line: str, language: str) -> str:
    """Line with string contents blanked and any trailing comment removed."""
    text = strip_strings(line)
    marker = "#" if language == "python" else "//"
    pos = text.find(marker)
    if pos != -1:
        text = text[:pos]
    return text


def indentation(line: str) -> int:
    return len(line) - len(line.lstrip())


def count_branches(code: str, language: str) -> int:
    """Number of branching tokens on an already comment/string-stripped line."""
    pattern = _PY_BRANCH_TOKENS if language == "python" else _BRANCH_TOKENS
    return len(pattern.findall(code))


def window_has_loop(lines: List[str], index: int, window: int) -> bool:
    """True if any of the `window` lines before 0-based `index` has a loop keyword."""
    start = max(0, index - window)
    return any(LOOP_KEYWORD.search(line) for line in lines[start:index])


def is_function_start(code: str, language: str) -> bool:
    """True if a comment/string-stripped line looks like it begins a function."""
    if language == "python":
        return _PY_DEF.match(code) is not None
    if _FUNCTION_MARKER.search(code):
        return True
    match = _METHOD_SIGNATURE.match(code)
    return match is not None and match.group(1) not in _CONTROL_WORDS


# ---------------------------------------------------------------------------
# Scans
# ---------------------------------------------------------------------------


@dataclass
class FunctionSpan:
    """A detected function: 1-based start/end lines plus cyclomatic complexity."""
    start_line: int
    end_line: int
    complexity: int

    @property
    def length(self) -> int:
        return self.end_line - self.start_line


@dataclass
class _Frame:
    start_line: int
    depth: int
    complexity: int = 1


def scan_functions(lines: List[str], language: str) -> List[FunctionSpan]:
    """Find function bodies and their complexity in one pass.

    Brace languages: a frame opens at the first `{` after a function marker and
    closes when brace depth returns to the depth recorded at that point. Branch
    tokens count towards the innermost open frame. Python uses indentation.
    """
    if language == "python":
        return _scan_python_functions(lines)

    spans: List[FunctionSpan] = []
    stack: List[_Frame] = []
    depth = 0
    pending: Optional[int] = None
    for idx, line in enumerate(lines, 1):
        code = code_part(line, language)
        if not code.strip():
            continue
        if is_function_start(code, language):
            pending = idx
        owner = stack[-1] if stack else None
        closed: List[_Frame] = []
        for ch in code:
            if ch == "{":
                if pending is not None:
                    frame = _Frame(start_line=pending, depth=depth)
                    stack.append(frame)
                    owner = frame
                    pending = None
                depth += 1
            elif ch == "}":
                depth = max(0, depth - 1)
                while stack and depth <= stack[-1].depth:
                    closed.append(stack.pop())
        if pending is not None and code.rstrip().endswith(";"):
            # expression-bodied arrow or prototype without a body
            pending = None
        if owner is not None:
            owner.complexity += count_branches(code, language)
        for frame in closed:
            spans.append(FunctionSpan(frame.start_line, idx, frame.complexity))
    return spans


def _scan_python_functions(lines: List[str]) -> List[FunctionSpan]:
    spans: List[FunctionSpan] = []
    stack: List[_Frame] = []
    last_code_line = 0
    for idx, line in enumerate(lines, 1):
        if not line.strip() or line.strip().startswith("#"):
            continue
        indent = indentation(line.expandtabs(4))
        while stack and indent <= stack[-1].depth:
            frame = stack.pop()
            spans.append(FunctionSpan(frame.start_line, last_code_line, frame.complexity))
        code = code_part(line, "python")
        if _PY_DEF.match(code):
            stack.append(_Frame(start_line=idx, depth=indent))
        elif stack:
            stack[-1].complexity += count_branches(code, "python")
        last_code_line = idx
    while stack:
        frame = stack.pop()
        spans.append(FunctionSpan(frame.start_line, last_code_line, frame.complexity))
    return spans


def loop_depths(lines: List[str], language: str) -> List[int]:
    """Loop nesting depth for every line (a loop header counts on its own line).

    The counter goes up on a loop keyword and comes back down when the block the
    loop opened is closed again.
    """
    if language == "python":
        return _python_loop_depths(lines)

    depths: List[int] = []
    stack: List[int] = []
    depth = 0
    pending = False
    for line in lines:
        code = code_part(line, language)
        if LOOP_KEYWORD.search(code):
            pending = True
        for ch in code:
            if ch == "{":
                if pending:
                    stack.append(depth)
                    pending = False
                depth += 1
            elif ch == "}":
                depth = max(0, depth - 1)
                while stack and depth <= stack[-1]:
                    stack.pop()
        depths.append(len(stack) + (1 if pending else 0))
        if pending and code.rstrip().endswith(";"):
            pending = False
    return depths


def _python_loop_depths(lines: List[str]) -> List[int]:
    depths: List[int] = []
    stack: List[int] = []
    for line in lines:
        if not line.strip() or line.strip().startswith("#"):
            depths.append(len(stack))
            continue
        indent = indentation(line.expandtabs(4))
        while stack and indent <= stack[-1]:
            stack.pop()
        code = code_part(line, "python")
        if _PY_LOOP_STATEMENT.match(code):
            stack.append(indent)
            depths.append(len(stack))
        elif re.search(r"\bfor\b", code):
            # comprehension: a loop for this line only
            depths.append(len(stack) + 1)
        else:
            depths.append(len(stack))
    return depths
