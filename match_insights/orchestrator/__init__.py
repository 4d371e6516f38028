# orchestrator package
"""Orchestrator that loads vacancy matches and serves memoised dashboard views."""

from match_insights.orchestrator.insights_orchestrator import (
    InsightsOrchestrator,
    MatchView,
    VacancySnapshot,
    vacancy_insights
)

__all__ = [
    "InsightsOrchestrator",
    "MatchView",
    "VacancySnapshot",
    "vacancy_insights",
]
