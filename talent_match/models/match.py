# models/match.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class WeightVector(BaseModel):
    """Caller-supplied scoring weights; omitted dimensions count as 0"""
    skills: Optional[float] = None
    responsibilities: Optional[float] = None
    job_title: Optional[float] = None
    experience: Optional[float] = None


class NormalizedWeightVector(BaseModel):
    """Weights actually applied to a match request, summing to 1.0"""
    skills: float
    responsibilities: float
    job_title: float
    experience: float

    model_config = ConfigDict(frozen=True)

    def total(self) -> float:
        return self.skills + self.responsibilities + self.job_title + self.experience


class ItemMatch(BaseModel):
    cv_index: int
    cv_item: str
    score: float

    model_config = ConfigDict(frozen=True)


class RequirementMatch(BaseModel):
    """Which CV item best satisfied one JD item, plus the runner-ups"""
    jd_index: int
    jd_item: str
    best_match: Optional[ItemMatch] = None
    score: float = 0.0
    alternatives: List[ItemMatch] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class CandidateBreakdown(BaseModel):
    candidate_id: str
    skills_score: float
    responsibilities_score: float
    job_title_score: float
    years_score: float
    overall_score: float
    skill_matches: List[RequirementMatch] = Field(default_factory=list)
    responsibility_matches: List[RequirementMatch] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class CandidateFailure(BaseModel):
    """Marker for a candidate that could not be scored"""
    candidate_id: str
    error_type: str
    error_code: str
    message: str

    model_config = ConfigDict(frozen=True)


class MatchResult(BaseModel):
    jd_id: str
    weights: NormalizedWeightVector
    top_alternatives: int
    candidates: List[CandidateBreakdown] = Field(default_factory=list)
    failures: List[CandidateFailure] = Field(default_factory=list)


class MatchRequest(BaseModel):
    jd_id: str
    cv_ids: List[str] = Field(default_factory=list)
    weights: Optional[WeightVector] = None
    top_alternatives: Optional[int] = Field(default=None, ge=0, description="Alternatives reported per JD item")
