from typing import Literal

from pydantic import BaseModel, ConfigDict


class AnalyzeImageRequest(BaseModel):
    image_url: str | None = None


class AnalyzeTextRequest(BaseModel):
    text: str = ""


class SheetData(BaseModel):
    model_config = ConfigDict(from_attributes=True, protected_namespaces=())

    make: str | None = None
    model: str | None = None
    year: int | None = None
    auction_grade: str | None = None
    interior_grade: str | None = None
    exterior_grade: str | None = None
    mileage_km: int | None = None
    notes: str = ""


class SubScoreRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    grade: int
    mileage: int
    year: int
    flags: int | None = None


class AnalysisResponse(BaseModel):
    status: Literal["Good Buy", "Caution", "Avoid"]
    score: int
    summary: str
    data: SheetData
    breakdown: SubScoreRead
    policy: str
