"""Checker service: size-guarded adapter between the API and the analysis engine."""

import asyncio
from pathlib import Path
from typing import Optional, Tuple

from code_quality_checker.issue import AnalysisReport
from code_quality_checker.main_checker import AnalysisEngine
from code_quality_checker.utils import detect_language

from ..errors import CheckerError, PathNotFoundError, SizeExceededError, ValidationError


class CheckerService:
    """Wraps AnalysisEngine for use by the API and the realtime pipeline."""

    def __init__(self, engine: AnalysisEngine, max_file_size_bytes: int):
        self.engine = engine
        self.max_file_size_bytes = max_file_size_bytes

    def analyze_code(
        self,
        code: Optional[str],
        language: Optional[str],
        file_path: Optional[str] = None,
        context: Optional[str] = None,
    ) -> AnalysisReport:
        """Run all detector families on raw code."""
        if code is None:
            raise ValidationError("code is required")
        if not language or not language.strip():
            raise ValidationError("language is required")
        self._check_size(len(code.encode("utf-8")))
        return self.engine.analyze(code, language, file_path=file_path, context=context)

    def analyze_file(self, file_path: Optional[str]) -> AnalysisReport:
        """Read a file from disk and analyze it with the language its extension implies."""
        code, language, label = self._load(file_path)
        return self.engine.analyze(code, language, file_path=label)

    async def analyze_file_async(self, file_path: str) -> AnalysisReport:
        code, language, label = await asyncio.to_thread(self._load, file_path)
        return await self.engine.analyze_async(code, language, file_path=label)

    def _load(self, file_path: Optional[str]) -> Tuple[str, str, str]:
        if not file_path or not str(file_path).strip():
            raise ValidationError("filePath is required")
        if not isinstance(file_path, str) or "\x00" in file_path:
            raise ValidationError(f"Invalid path: {file_path!r}")
        p = Path(file_path).expanduser()
        if not p.is_file():
            raise PathNotFoundError(file_path)
        try:
            self._check_size(p.stat().st_size)
            code = p.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise CheckerError(f"Cannot read {file_path}: {e.strerror or e}") from e
        return code, detect_language(p), str(p.resolve())

    def _check_size(self, size: int) -> None:
        if size > self.max_file_size_bytes:
            raise SizeExceededError(size, self.max_file_size_bytes)
