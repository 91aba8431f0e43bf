"""
Security checks: injection, cryptography, authentication, data exposure and
risky dependencies.
"""

import re

from ..checker_base import BaseChecker
from ..issue import Category, Severity

SQL_VERBS = re.compile(r"\b(?:SELECT|INSERT|UPDATE|DELETE)\b")
QUERY_CALL = re.compile(r"query|execute", re.IGNORECASE)
INTERPOLATION = re.compile(r"\+|\$\{|\bf[\"']|%\s*\(|\.format\(")
COMMAND_CALL = re.compile(r"\b(?:exec|system|shell_exec|popen|spawn)\s*\(")
EVAL_CALL = re.compile(r"(?<![\w.])eval\s*\(")
WEAK_HASHES = re.compile(r"\b(?:md5|sha1)\b", re.IGNORECASE)
WEAK_CIPHERS = re.compile(r"\b(?:3DES|DES|TripleDES|RC4)\b")

SECRET_PATTERNS = (
    re.compile(r"password\s*[=:]\s*['\"][^'\"]+['\"]", re.IGNORECASE),
    re.compile(r"api[_-]?key\s*[=:]\s*['\"][^'\"]+['\"]", re.IGNORECASE),
    re.compile(r"secret\s*[=:]\s*['\"][^'\"]+['\"]", re.IGNORECASE),
    re.compile(r"token\s*[=:]\s*['\"][^'\"]+['\"]", re.IGNORECASE),
)

SENSITIVE_TERMS = ('password', 'token', 'secret', 'key', 'credit', 'ssn')
LOG_CALLS = ('console.log', 'logger', 'logging.', 'print(')
AUTH_MARKERS = ('authenticate', 'auth', 'verify')

DANGEROUS_MODULES = {
    'javascript': ('eval', 'vm', 'child_process'),
    'typescript': ('eval', 'vm', 'child_process'),
    'python': ('pickle', 'marshal', 'shelve'),
}
DEPRECATED_PACKAGES = {
    'javascript': ('request', 'node-uuid'),
    'typescript': ('request', 'node-uuid'),
    'python': ('imp', 'optparse'),
}


class SecurityChecker(BaseChecker):
    """Signature and taint heuristics for common vulnerabilities."""

    family = "security"

    def _rules(self):
        return [
            self._check_injection_vulnerabilities,
            self._check_cryptographic_issues,
            self._check_authentication_issues,
            self._check_data_exposure,
            self._check_insecure_dependencies,
        ]

    def _check_injection_vulnerabilities(self):
        """SQL/command injection, XSS, eval and path traversal."""
        for i, line in enumerate(self.lines, 1):
            trimmed = line.strip()
            if not trimmed or self._is_comment(trimmed):
                continue

            if QUERY_CALL.search(trimmed) and INTERPOLATION.search(trimmed) and SQL_VERBS.search(trimmed):
                self._add_issue(
                    Category.SECURITY, Severity.CRITICAL, i,
                    "Potential SQL injection vulnerability - string concatenation in SQL query",
                    "Use parameterized queries or prepared statements",
                )

            if self.is_js and 'innerHTML' in trimmed and '+' in trimmed:
                self._add_issue(
                    Category.SECURITY, Severity.HIGH, i,
                    "Potential XSS vulnerability - dynamic HTML content",
                    "Use textContent or properly sanitize HTML content",
                )

            if (self.is_js or self.is_python) and EVAL_CALL.search(self._code(line)):
                self._add_issue(
                    Category.SECURITY, Severity.CRITICAL, i,
                    "Use of eval() is dangerous and can lead to code injection",
                    "Avoid eval() and use safer alternatives like JSON.parse() or ast.literal_eval()",
                )

            if COMMAND_CALL.search(trimmed) and INTERPOLATION.search(trimmed):
                self._add_issue(
                    Category.SECURITY, Severity.CRITICAL, i,
                    "Potential command injection vulnerability",
                    "Validate and sanitize input before executing system commands",
                )

            if '../' in trimmed or '..\\' in trimmed:
                self._add_issue(
                    Category.SECURITY, Severity.HIGH, i,
                    "Potential path traversal vulnerability",
                    "Validate file paths and resolve them against an allowed base directory",
                )

    def _check_cryptographic_issues(self):
        """Weak hashes and ciphers, hard-coded secrets, insecure randomness."""
        for i, line in enumerate(self.lines, 1):
            trimmed = line.strip()
            if not trimmed:
                continue

            if WEAK_HASHES.search(trimmed):
                self._add_issue(
                    Category.SECURITY, Severity.HIGH, i,
                    "Weak hashing algorithm detected (MD5/SHA1)",
                    "Use stronger hashing algorithms like SHA-256 or bcrypt for passwords",
                )

            if any(p.search(trimmed) for p in SECRET_PATTERNS):
                self._add_issue(
                    Category.SECURITY, Severity.CRITICAL, i,
                    "Hard-coded secret detected",
                    "Move secrets to environment variables or secure configuration",
                )

            if 'Math.random()' in trimmed:
                self._add_issue(
                    Category.SECURITY, Severity.MEDIUM, i,
                    "Math.random() is not cryptographically secure",
                    "Use crypto.randomBytes() for security-sensitive random number generation",
                )

            if WEAK_CIPHERS.search(trimmed):
                self._add_issue(
                    Category.SECURITY, Severity.HIGH, i,
                    "Weak encryption algorithm detected",
                    "Use AES encryption instead of DES/3DES/RC4",
                )

    def _check_authentication_issues(self):
        """Cookie flags, JWT expiry and unauthenticated mutating routes."""
        has_auth = any(marker in self.code for marker in AUTH_MARKERS)
        for i, line in enumerate(self.lines, 1):
            trimmed = line.strip()
            if not trimmed:
                continue

            if 'session' in trimmed and 'httpOnly: false' in trimmed:
                self._add_issue(
                    Category.SECURITY, Severity.HIGH, i,
                    "Session cookies should have httpOnly flag",
                    "Set httpOnly: true for session cookies to prevent XSS access",
                )

            if 'session' in trimmed and 'secure: false' in trimmed:
                self._add_issue(
                    Category.SECURITY, Severity.HIGH, i,
                    "Session cookies should have secure flag in production",
                    "Set secure: true for session cookies in HTTPS environments",
                )

            if 'jwt.sign' in trimmed and 'expiresIn' not in trimmed:
                self._add_issue(
                    Category.SECURITY, Severity.MEDIUM, i,
                    "JWT token without expiration time",
                    "Set appropriate expiration time for JWT tokens",
                )

            if re.search(r"\brouter\.(?:delete|put|post|patch)\b", trimmed) and not has_auth:
                self._add_issue(
                    Category.SECURITY, Severity.HIGH, i,
                    "Potential missing authentication for sensitive route",
                    "Add authentication middleware for sensitive operations",
                )

    def _check_data_exposure(self):
        """Secrets in logs, revealing error messages, wildcard CORS."""
        for i, line in enumerate(self.lines, 1):
            trimmed = line.strip()
            if not trimmed:
                continue

            if any(call in trimmed for call in LOG_CALLS):
                lowered = trimmed.lower()
                if any(term in lowered for term in SENSITIVE_TERMS):
                    self._add_issue(
                        Category.SECURITY, Severity.HIGH, i,
                        "Potential sensitive data exposure in logs",
                        "Avoid logging sensitive information",
                    )

            if 'throw new Error' in trimmed or 'res.send' in trimmed or trimmed.startswith('raise '):
                if 'database' in trimmed or 'SQL' in trimmed or 'password' in trimmed:
                    self._add_issue(
                        Category.SECURITY, Severity.MEDIUM, i,
                        "Error message may expose sensitive information",
                        "Use generic error messages for client responses",
                    )

            if 'Access-Control-Allow-Origin' in trimmed and '*' in trimmed:
                self._add_issue(
                    Category.SECURITY, Severity.MEDIUM, i,
                    "Wildcard CORS policy detected",
                    "Specify allowed origins instead of using wildcard (*)",
                )

    def _check_insecure_dependencies(self):
        """Dangerous or deprecated modules, unvalidated file system access."""
        dangerous = DANGEROUS_MODULES.get(self.language, ())
        deprecated = DEPRECATED_PACKAGES.get(self.language, ())
        validates_paths = 'path.resolve' in self.code or 'path.join' in self.code
        for i, line in enumerate(self.lines, 1):
            trimmed = line.strip()
            if not trimmed:
                continue

            if 'require(' in trimmed or 'import' in trimmed:
                imported = self._imported_names(trimmed)
                for module in dangerous:
                    if module in imported:
                        self._add_issue(
                            Category.SECURITY, Severity.HIGH, i,
                            f"Use of potentially dangerous module: {module}",
                            "Review the necessity and implement proper security measures",
                        )
                for pkg in deprecated:
                    if pkg in imported:
                        self._add_issue(
                            Category.SECURITY, Severity.MEDIUM, i,
                            f"Deprecated package detected: {pkg}",
                            "Replace with actively maintained alternatives",
                        )

            if 'fs.' in trimmed and ('readFile' in trimmed or 'writeFile' in trimmed) and not validates_paths:
                self._add_issue(
                    Category.SECURITY, Severity.MEDIUM, i,
                    "File system operation without path validation",
                    "Use path.resolve() or path.join() to validate file paths",
                )

    def _imported_names(self, trimmed: str):
        """Module names referenced by an import/require line."""
        if self.is_python:
            m = re.match(r"^(?:from\s+([\w.]+)\s+import|import\s+([\w., ]+))", trimmed)
            if not m:
                return set()
            if m.group(1):
                return {m.group(1).split('.')[0]}
            return {part.strip().split(' ')[0].split('.')[0] for part in m.group(2).split(',')}
        return set(re.findall(r"['\"]([^'\"]+)['\"]", trimmed))
