from app.schemas.analysis import (
    AnalysisResponse,
    AnalyzeImageRequest,
    AnalyzeTextRequest,
    SheetData,
    SubScoreRead,
)

__all__ = [
    "AnalysisResponse",
    "AnalyzeImageRequest",
    "AnalyzeTextRequest",
    "SheetData",
    "SubScoreRead",
]
