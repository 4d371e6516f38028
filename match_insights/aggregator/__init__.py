# aggregator package
"""Pure filtering, ranking and coverage functions over match records."""

from match_insights.aggregator.match_aggregator import (
    filter_by_score_range,
    filter_by_skills,
    sort_matches,
    top_n,
    compute_skill_coverage,
    coverage_distribution,
    average_coverage,
    coverage_recommendation,
    classify_skill_coverage,
    classify_match_quality,
    classify_score_color,
    toggle_comparison,
    select_for_comparison,
    skill_match_breakdown,
    build_insight_summary,
    round_half_up,
    SORT_FIELDS,
)

__all__ = [
    "filter_by_score_range",
    "filter_by_skills",
    "sort_matches",
    "top_n",
    "compute_skill_coverage",
    "coverage_distribution",
    "average_coverage",
    "coverage_recommendation",
    "classify_skill_coverage",
    "classify_match_quality",
    "classify_score_color",
    "toggle_comparison",
    "select_for_comparison",
    "skill_match_breakdown",
    "build_insight_summary",
    "round_half_up",
    "SORT_FIELDS",
]
