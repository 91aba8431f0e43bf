"""Pydantic request/response models."""

from typing import List, Optional

from pydantic import BaseModel, Field

from code_quality_checker.issue import AnalysisReport


# --- Request ---


class AnalyzeRequest(BaseModel):
    """Request body for raw code analysis."""

    code: Optional[str] = Field(default=None, description="Source code to analyze")
    language: Optional[str] = Field(default=None, description="Language: javascript, typescript, python, ...")
    file_path: Optional[str] = Field(default=None, alias="filePath", description="Label carried into the report")
    context: Optional[str] = Field(default=None, description="Extra context for the summary")

    model_config = {"populate_by_name": True}


class AnalyzeFileRequest(BaseModel):
    """Request body for file-path-based analysis."""

    file_path: Optional[str] = Field(default=None, alias="filePath", description="Path to source file on server")

    model_config = {"populate_by_name": True}


class WatchRequest(BaseModel):
    """Request body for starting or stopping a watch."""

    path: Optional[str] = Field(default=None, description="Directory or file to watch")


# --- Responses ---


class IssueOut(BaseModel):
    """Single finding."""

    category: str = Field(..., description="security, performance, style, bug or suggestion")
    severity: str = Field(..., description="low, medium, high or critical")
    line: Optional[int] = None
    message: str
    suggestion: Optional[str] = None


class RuleFailureOut(BaseModel):
    family: str
    rule: str
    error: str


class AnalysisReportOut(BaseModel):
    """Response for the analyze endpoints."""

    issues: List[IssueOut] = Field(default_factory=list)
    score: int
    language: str = ""
    file_path: Optional[str] = Field(default=None, alias="filePath")
    summary: Optional[str] = None
    optimized_code: Optional[str] = Field(default=None, alias="optimizedCode")
    enrichment: str = "skipped"
    enrichment_error: Optional[str] = Field(default=None, alias="enrichmentError")
    degraded_rules: List[RuleFailureOut] = Field(default_factory=list, alias="degradedRules")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_report(cls, report: AnalysisReport) -> "AnalysisReportOut":
        return cls.model_validate(report.to_dict())


class RealtimeAnalysisResult(BaseModel):
    """Payload of a `realtime_analysis` broadcast."""

    file_path: str = Field(..., alias="filePath")
    analysis: Optional[AnalysisReportOut] = None
    timestamp: int = Field(..., description="Milliseconds since epoch")
    change_type: str = Field(..., alias="changeType")

    model_config = {"populate_by_name": True}


class WatchResponse(BaseModel):
    message: str
    path: str


class WatchedPathsResponse(BaseModel):
    paths: List[str] = Field(default_factory=list)


class LanguagesResponse(BaseModel):
    languages: List[str] = Field(default_factory=list)


class ErrorDetail(BaseModel):
    """Error response detail."""

    detail: str = Field(..., description="Error message")
