# models package
"""Data models for match aggregation."""

from match_insights.models.skill import SkillMatch, MATCH_TYPES
from match_insights.models.match_record import MatchRecord, MatchAnalysis, ExperienceAnalysis
from match_insights.models.vacancy import VacancyRequirement, SkillFilterState
from match_insights.models.insights import CoverageEntry, TopCandidate, InsightSummary, MatchFilters

__all__ = [
    "SkillMatch",
    "MATCH_TYPES",
    "MatchRecord",
    "MatchAnalysis",
    "ExperienceAnalysis",
    "VacancyRequirement",
    "SkillFilterState",
    "CoverageEntry",
    "TopCandidate",
    "InsightSummary",
    "MatchFilters",
]
