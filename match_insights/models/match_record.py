import math
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _to_float(value: Any) -> float:
    """float() tollerante: NaN se non numerico, ±inf per interi troppo grandi."""
    if isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except OverflowError:
        # int JSON oltre il range dei float
        return math.inf if value > 0 else -math.inf
    except (TypeError, ValueError):
        return math.nan


def coerce_score(value: Any) -> float:
    """Converte uno score grezzo in float nel range [0, 100] (0 se non numerico)."""
    score = _to_float(value)
    if math.isnan(score):
        return 0.0
    return min(100.0, max(0.0, score))


def coerce_number(value: Any) -> float:
    """Come coerce_score ma senza clamp superiore (es. anni di esperienza)."""
    number = _to_float(value)
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return max(0.0, number)


def coerce_skill_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    try:
        return [str(v) for v in value if v is not None]
    except TypeError:
        return []


class ExperienceAnalysis(BaseModel):
    """Dettaglio esperienza calcolato dal backend."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    total_years: float = Field(0.0, alias="totalYears")
    required_years: float = Field(0.0, alias="requiredYears")
    relevance: float = 0.0              # 0-100
    recency: float = 0.0                # 0-100

    @field_validator("total_years", "required_years", mode="before")
    @classmethod
    def _years(cls, v: Any) -> float:
        return coerce_number(v)

    @field_validator("relevance", "recency", mode="before")
    @classmethod
    def _percent(cls, v: Any) -> float:
        return coerce_score(v)


class MatchAnalysis(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    experience: Optional[ExperienceAnalysis] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_flat_shape(cls, data: Any) -> Any:
        # Il backend annida i campi sotto "experience", ma accettiamo anche la forma piatta
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict):
            return {}
        if "experience" not in data and any(
            k in data for k in ("totalYears", "requiredYears", "relevance", "recency")
        ):
            return {"experience": data}
        if not isinstance(data.get("experience"), (dict, ExperienceAnalysis)):
            return {k: v for k, v in data.items() if k != "experience"}
        return data


class MatchRecord(BaseModel):
    """Fit di un candidato rispetto a una vacancy (forma JSON del backend)."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    candidate_id: str = Field("", alias="candidateId")
    candidate_name: str = Field("", alias="candidateName")
    candidate_email: str = Field("", alias="candidateEmail")
    match_score: float = Field(0.0, alias="matchScore")             # 0-100
    skills_score: float = Field(0.0, alias="skillsScore")
    experience_score: float = Field(0.0, alias="experienceScore")
    education_score: float = Field(0.0, alias="educationScore")
    matched_skills: List[str] = Field(default_factory=list, alias="matchedSkills")
    missing_skills: List[str] = Field(default_factory=list, alias="missingSkills")
    analysis: Optional[MatchAnalysis] = None
    cv_url: Optional[str] = Field(None, alias="cvUrl")

    @field_validator("candidate_id", "candidate_name", "candidate_email", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator(
        "match_score", "skills_score", "experience_score", "education_score", mode="before"
    )
    @classmethod
    def _score(cls, v: Any) -> float:
        return coerce_score(v)

    @field_validator("matched_skills", "missing_skills", mode="before")
    @classmethod
    def _skills(cls, v: Any) -> List[str]:
        return coerce_skill_list(v)

    @field_validator("analysis", mode="before")
    @classmethod
    def _analysis(cls, v: Any) -> Any:
        if isinstance(v, (dict, MatchAnalysis)):
            return v
        return None

    @field_validator("cv_url", mode="before")
    @classmethod
    def _cv_url(cls, v: Any) -> Optional[str]:
        return str(v) if v else None

    @classmethod
    def from_wire(cls, data: Any) -> "MatchRecord":
        """Costruisce un record da JSON non controllato, senza mai sollevare eccezioni."""
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict):
            return cls()
        return cls.model_validate(data)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
