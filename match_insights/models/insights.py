from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class CoverageEntry(BaseModel):
    """Copertura di una skill richiesta nel pool di candidati."""
    model_config = ConfigDict(frozen=True)

    skill: str
    count: int = 0
    percentage: int = 0                                    # 0-100, arrotondato
    exact_count: int = 0                                   # almeno un match senza suffisso
    fuzzy_count: int = 0                                   # solo match (semantic)/(partial)
    missing_count: int = 0
    candidates: Tuple[str, ...] = ()                       # candidateId che coprono la skill


class TopCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    candidate_id: str
    name: str
    match_score: int            # score arrotondati, come mostrati nel pannello
    skills_score: int
    experience_score: int
    education_score: int
    matched_count: int
    required_count: int         # matched + missing


class InsightSummary(BaseModel):
    """Riepilogo deterministico del pannello "AI Matching Insights"."""
    model_config = ConfigDict(frozen=True)

    total_count: int = 0
    top_candidate: Optional[TopCandidate] = None
    coverage: List[CoverageEntry] = Field(default_factory=list)
    skill_gaps: List[str] = Field(default_factory=list)
    most_covered: Optional[CoverageEntry] = None
    least_covered: Optional[CoverageEntry] = None
    recommendation: str = ""
    strengths: List[str] = Field(default_factory=list)     # skill con copertura > 70%
    match_distribution: Dict[str, int] = Field(default_factory=dict)  # exact / fuzzy / missing
    average_coverage: int = 0
    coverage_recommendation: str = ""
    lines: List[str] = Field(default_factory=list)


class MatchFilters(BaseModel):
    """Chiave di memoizzazione per le viste filtrate di un pool di match."""
    model_config = ConfigDict(frozen=True)

    min_score: float = 0.0
    max_score: float = 100.0
    sort_key: str = "overall"
    selected_skills: Tuple[str, ...] = ()
