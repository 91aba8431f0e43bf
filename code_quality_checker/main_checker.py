"""
Main checker class that coordinates all detector families.
"""

import asyncio
import logging
from dataclasses import replace
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import List, Optional, Protocol, Sequence, Tuple, Type

from .checker_base import BaseChecker
from .checkers import MaintainabilityChecker, PerformanceChecker, SecurityChecker, StyleChecker
from .issue import AnalysisReport, Assessment, EnrichmentStatus, Issue, RuleFailure
from .scoring import calculate_score
from .settings import DEFAULT_SETTINGS, AnalysisSettings
from .utils import normalize_language

logger = logging.getLogger(__name__)

# Output order of the families in every report.
FAMILIES: Tuple[Type[BaseChecker], ...] = (
    SecurityChecker,
    PerformanceChecker,
    StyleChecker,
    MaintainabilityChecker,
)


class Assessor(Protocol):
    """Anything that can turn code plus findings into a natural-language assessment."""

    def summarize(
        self,
        code: str,
        language: str,
        issues: Sequence[Issue],
        context: Optional[str] = None,
    ) -> Optional[Assessment]:
        ...


def _run_family(family: Type[BaseChecker], settings: AnalysisSettings, code: str, language: str):
    checker = family(settings)
    issues = checker.check(code, language)
    return issues, checker.failures


class AnalysisEngine:
    """Runs the four detector families over one source text and scores the result.

    The engine holds no per-analysis state, so one instance may serve many
    concurrent analyses.
    """

    def __init__(
        self,
        settings: Optional[AnalysisSettings] = None,
        assessor: Optional[Assessor] = None,
        enrichment_timeout: float = 30.0,
    ):
        self.settings = settings or DEFAULT_SETTINGS
        self.assessor = assessor
        self.enrichment_timeout = enrichment_timeout

    def analyze(
        self,
        code: str,
        language: str,
        file_path: Optional[str] = None,
        context: Optional[str] = None,
    ) -> AnalysisReport:
        """Analyze one source text.

        Args:
            code: Source text, possibly empty.
            language: Language hint (``javascript``, ``python``, ...).
            file_path: Label carried into the report.
            context: Free text passed to the assessor only.

        Returns:
            AnalysisReport with issues in family order. A family that raises is
            reported in ``degraded_rules``; enrichment problems only change the
            ``enrichment`` status.
        """
        code = code or ""
        language = normalize_language(language)

        issues: List[Issue] = []
        failures: List[RuleFailure] = []
        with ThreadPoolExecutor(max_workers=len(FAMILIES), thread_name_prefix="detector") as pool:
            futures = [
                (family, pool.submit(_run_family, family, self.settings, code, language))
                for family in FAMILIES
            ]
            for family, future in futures:
                try:
                    family_issues, family_failures = future.result()
                except Exception as e:
                    logger.warning("Detector family %s failed: %s", family.family, e)
                    failures.append(RuleFailure(family.family, "*", f"{type(e).__name__}: {e}"))
                    continue
                issues.extend(family_issues)
                failures.extend(family_failures)

        score = calculate_score(issues, self.settings.severity_weights)
        report = AnalysisReport(
            issues=tuple(issues),
            score=score,
            language=language,
            file_path=file_path,
            degraded_rules=tuple(failures),
        )
        if self.assessor is None:
            return report
        return self._enrich(report, code, context)

    async def analyze_async(
        self,
        code: str,
        language: str,
        file_path: Optional[str] = None,
        context: Optional[str] = None,
    ) -> AnalysisReport:
        """Same as `analyze`, run on a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self.analyze, code, language, file_path, context)

    def _enrich(self, report: AnalysisReport, code: str, context: Optional[str]) -> AnalysisReport:
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="assessor")
        future = pool.submit(self.assessor.summarize, code, report.language, report.issues, context)
        try:
            assessment = future.result(timeout=self.enrichment_timeout)
        except FutureTimeoutError:
            logger.warning("Assessment timed out after %.1fs", self.enrichment_timeout)
            return replace(report, enrichment=EnrichmentStatus.TIMEOUT,
                           enrichment_error=f"timed out after {self.enrichment_timeout:g}s")
        except Exception as e:
            logger.warning("Assessment failed: %s", e)
            return replace(report, enrichment=EnrichmentStatus.ERROR,
                           enrichment_error=f"{type(e).__name__}: {e}")
        finally:
            # a timed-out call keeps running in the background; don't wait for it
            pool.shutdown(wait=False)

        if assessment is None:
            return replace(report, enrichment=EnrichmentStatus.UNAVAILABLE,
                           enrichment_error="assessment service unavailable")
        return replace(
            report,
            summary=assessment.summary,
            optimized_code=assessment.optimized_code,
            enrichment=EnrichmentStatus.OK,
        )
