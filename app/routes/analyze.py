"""Analyze routes (raw code and files on the server)."""

from fastapi import APIRouter, Depends

from ..schemas import AnalysisReportOut, AnalyzeFileRequest, AnalyzeRequest, ErrorDetail
from ..services import CheckerService
from ..utils import get_checker

router = APIRouter(prefix="/api")

ERROR_RESPONSES = {
    400: {"model": ErrorDetail},
    404: {"model": ErrorDetail},
    413: {"model": ErrorDetail},
}


@router.post("/analyze-code", response_model=AnalysisReportOut, responses=ERROR_RESPONSES)
def analyze_code(req: AnalyzeRequest, checker: CheckerService = Depends(get_checker)) -> AnalysisReportOut:
    """Run every detector family on the submitted code."""
    report = checker.analyze_code(req.code, req.language, file_path=req.file_path, context=req.context)
    return AnalysisReportOut.from_report(report)


@router.post("/analyze-file", response_model=AnalysisReportOut, responses=ERROR_RESPONSES)
def analyze_file(req: AnalyzeFileRequest, checker: CheckerService = Depends(get_checker)) -> AnalysisReportOut:
    """Read a file on the server and analyze it."""
    report = checker.analyze_file(req.file_path)
    return AnalysisReportOut.from_report(report)
