"""
Test Match Aggregator
"""

from match_insights.aggregator import (
    average_coverage,
    build_insight_summary,
    classify_match_quality,
    classify_score_color,
    classify_skill_coverage,
    compute_skill_coverage,
    coverage_distribution,
    coverage_recommendation,
    filter_by_score_range,
    filter_by_skills,
    select_for_comparison,
    skill_match_breakdown,
    sort_matches,
    toggle_comparison,
    top_n,
)
from match_insights.models import MatchRecord, SkillFilterState

# ═══════════════════════════════════════════════════════════════════════════
# TEST DATA
# ═══════════════════════════════════════════════════════════════════════════


def _record(cid, score=0, skills=0, experience=0, education=0, matched=None, missing=None, name=None):
    return MatchRecord.from_wire({
        "candidateId": cid,
        "candidateName": name or f"Candidate {cid}",
        "candidateEmail": f"{cid}@example.com",
        "matchScore": score,
        "skillsScore": skills,
        "experienceScore": experience,
        "educationScore": education,
        "matchedSkills": matched or [],
        "missingSkills": missing or [],
    })


def _ids(records):
    return [r.candidate_id for r in records]


POOL = [
    _record("a", 90, skills=40, matched=["Python", "SQL", "React.js (semantic)"]),
    _record("b", 55, skills=90, matched=["Java (partial)", "AWS"]),
    _record("c", 72, skills=40, matched=["python", "Docker"], missing=["SQL"]),
]


# ═══════════════════════════════════════════════════════════════════════════
# FILTRI
# ═══════════════════════════════════════════════════════════════════════════

def test_filter_by_score_range_keeps_order():
    result = filter_by_score_range(POOL, 60, 100)
    assert [r.match_score for r in result] == [90, 72]


def test_filter_by_score_range_is_idempotent():
    once = filter_by_score_range(POOL, 50, 80)
    twice = filter_by_score_range(once, 50, 80)
    assert _ids(once) == _ids(twice) == ["b", "c"]


def test_filter_by_score_range_bounds_are_inclusive():
    assert _ids(filter_by_score_range(POOL, 55, 72)) == ["b", "c"]


def test_filter_by_score_range_swaps_inverted_bounds():
    assert _ids(filter_by_score_range(POOL, 100, 60)) == ["a", "c"]


def test_filter_by_score_range_empty_input():
    assert filter_by_score_range([], 0, 100) == []
    assert filter_by_score_range(None, 0, 100) == []


def test_filter_by_score_range_does_not_mutate_input():
    pool = list(POOL)
    result = filter_by_score_range(pool, 60, 100)
    assert result is not pool
    assert _ids(pool) == ["a", "b", "c"]


def test_filter_by_skills_strips_annotation_case_insensitive():
    assert _ids(filter_by_skills(POOL, ["java"])) == ["b"]


def test_filter_by_skills_requires_every_skill():
    assert _ids(filter_by_skills(POOL, ["python", "sql"])) == ["a"]


def test_filter_by_skills_substring_both_directions():
    # "react" ⊂ "react.js" e "docker" ⊂ "docker compose"
    assert _ids(filter_by_skills(POOL, ["React"])) == ["a"]
    assert _ids(filter_by_skills(POOL, ["Docker Compose"])) == ["c"]


def test_filter_by_skills_empty_selection_is_noop():
    assert _ids(filter_by_skills(POOL, [])) == ["a", "b", "c"]
    assert _ids(filter_by_skills(POOL, None)) == ["a", "b", "c"]


def test_filter_by_skills_preserves_order():
    assert _ids(filter_by_skills(POOL, ["python"])) == ["a", "c"]


def test_filter_by_skills_accepts_filter_state():
    state = SkillFilterState.from_required_skills(["Python", "AWS"]).toggle("AWS")
    assert _ids(filter_by_skills(POOL, state)) == ["b"]


def test_filter_by_skills_mapping_uses_only_true_flags():
    raw = [{"candidateId": "x", "matchScore": 60, "matchedSkills": ["Go"]}]
    assert _ids(filter_by_skills(raw, {"Java": False, "Python": False})) == ["x"]
    assert _ids(filter_by_skills(POOL, {"Python": True, "AWS": False})) == ["a", "c"]


def test_filter_accepts_raw_wire_dicts():
    raw = [{"candidateId": "x", "matchScore": "80", "matchedSkills": None}, {"candidateId": "y"}]
    assert _ids(filter_by_score_range(raw, 50, 100)) == ["x"]
    assert filter_by_skills(raw, ["python"]) == []


# ═══════════════════════════════════════════════════════════════════════════
# ORDINAMENTO
# ═══════════════════════════════════════════════════════════════════════════

def test_sort_matches_by_skills_is_stable():
    result = sort_matches(POOL, "skills")
    assert [r.skills_score for r in result] == [90, 40, 40]
    assert _ids(result) == ["b", "a", "c"]


def test_sort_matches_overall_stable_for_ties():
    pool = [_record("x", 70), _record("y", 80), _record("z", 70), _record("w", 70)]
    assert _ids(sort_matches(pool, "overall")) == ["y", "x", "z", "w"]
    assert _ids(sort_matches(pool, "overall")) == _ids(sort_matches(pool, "overall"))


def test_sort_matches_unknown_key_falls_back_to_overall():
    assert _ids(sort_matches(POOL, "salary")) == ["a", "c", "b"]
    assert _ids(sort_matches(POOL, None)) == ["a", "c", "b"]
    assert _ids(sort_matches(POOL, ["skills"])) == ["a", "c", "b"]
    assert _ids(sort_matches(POOL, {})) == ["a", "c", "b"]


def test_sort_matches_experience_and_education():
    pool = [_record("x", experience=10, education=90), _record("y", experience=60, education=20)]
    assert _ids(sort_matches(pool, "experience")) == ["y", "x"]
    assert _ids(sort_matches(pool, "education")) == ["x", "y"]


def test_top_n_is_a_plain_slice():
    assert _ids(top_n(POOL, 2)) == ["a", "b"]
    assert _ids(top_n(POOL, 5)) == ["a", "b", "c"]
    assert top_n(POOL, 0) == []
    assert top_n(POOL, -1) == []


def test_top_n_non_finite_counts():
    assert _ids(top_n(POOL, float("inf"))) == ["a", "b", "c"]
    assert top_n(POOL, float("-inf")) == []
    assert top_n(POOL, float("nan")) == []
    assert top_n(POOL, "two") == []


# ═══════════════════════════════════════════════════════════════════════════
# COPERTURA
# ═══════════════════════════════════════════════════════════════════════════

def test_compute_skill_coverage_empty_pool():
    coverage = compute_skill_coverage([], ["X"])
    assert len(coverage) == 1
    assert (coverage[0].skill, coverage[0].count, coverage[0].percentage) == ("X", 0, 0)


def test_compute_skill_coverage_ties_follow_required_order():
    pool = [_record("a", matched=["SQL", "Python"]), _record("b", matched=[])]
    coverage = compute_skill_coverage(pool, ["SQL", "Python"])
    assert [(e.skill, e.count, e.percentage) for e in coverage] == [
        ("SQL", 1, 50),
        ("Python", 1, 50),
    ]
    assert coverage[0].candidates == ("a",)


def test_compute_skill_coverage_lowest_first():
    coverage = compute_skill_coverage(POOL, ["Python", "AWS", "Kubernetes"])
    assert [(e.skill, e.percentage) for e in coverage] == [
        ("Kubernetes", 0),
        ("AWS", 33),
        ("Python", 67),
    ]


def test_compute_skill_coverage_rounds_half_up():
    pool = [_record("hit", matched=["Go"])] + [_record(f"m{i}") for i in range(7)]
    assert compute_skill_coverage(pool, ["Go"])[0].percentage == 13


def test_compute_skill_coverage_bounds():
    for entry in compute_skill_coverage(POOL, ["Python", "SQL", "Java", "React", "Rust"]):
        assert 0 <= entry.percentage <= 100


def test_semantic_annotation_counts_for_coverage():
    entry = compute_skill_coverage([_record("a", matched=["React.js (semantic)"])], ["React"])[0]
    assert entry.count == 1
    assert entry.percentage == 100


def test_compute_skill_coverage_splits_exact_and_fuzzy():
    coverage = {e.skill: e for e in compute_skill_coverage(POOL, ["Python", "Java", "React", "Rust"])}
    assert (coverage["Python"].exact_count, coverage["Python"].fuzzy_count) == (2, 0)
    assert (coverage["Java"].exact_count, coverage["Java"].fuzzy_count) == (0, 1)
    assert (coverage["React"].exact_count, coverage["React"].fuzzy_count) == (0, 1)
    assert coverage["Rust"].missing_count == 3
    for entry in coverage.values():
        assert entry.exact_count + entry.fuzzy_count + entry.missing_count == 3


def test_exact_entry_wins_over_annotated_one():
    entry = compute_skill_coverage([_record("a", matched=["SQL (partial)", "sql"])], ["SQL"])[0]
    assert (entry.exact_count, entry.fuzzy_count) == (1, 0)


def test_coverage_distribution_and_average():
    coverage = compute_skill_coverage(POOL, ["Python", "SQL", "Kubernetes"])
    assert coverage_distribution(coverage) == {"exact": 3, "fuzzy": 0, "missing": 6}
    # (0 + 33 + 67) / 3
    assert average_coverage(coverage) == 33
    assert average_coverage([]) == 0


# ═══════════════════════════════════════════════════════════════════════════
# CLASSIFICAZIONE
# ═══════════════════════════════════════════════════════════════════════════

def test_classify_skill_coverage_thresholds():
    assert classify_skill_coverage(39) == "low"
    assert classify_skill_coverage(40) == "medium"
    assert classify_skill_coverage(69) == "medium"
    assert classify_skill_coverage(70) == "high"


def test_classify_match_quality_thresholds():
    assert classify_match_quality(29) == "low"
    assert classify_match_quality(30) == "medium"
    assert classify_match_quality(69) == "medium"
    assert classify_match_quality(70) == "high"


def test_classifiers_disagree_between_30_and_40():
    assert classify_match_quality(35) == "medium"
    assert classify_skill_coverage(35) == "low"


def test_classify_score_color():
    assert [classify_score_color(s) for s in (85, 60, 45, 10, "bad")] == [
        "excellent", "good", "fair", "poor", "poor",
    ]


# ═══════════════════════════════════════════════════════════════════════════
# CONFRONTO
# ═══════════════════════════════════════════════════════════════════════════

def test_toggle_comparison_limit():
    selected = []
    for cid in ["a", "b", "c", "d", "e"]:
        selected = toggle_comparison(selected, cid)
    assert selected == ["a", "b", "c", "d"]
    assert toggle_comparison(selected, "b") == ["a", "c", "d"]


def test_select_for_comparison_sorted_by_score():
    assert _ids(select_for_comparison(POOL, ["b", "a"])) == ["a", "b"]


def test_skill_match_breakdown_counts():
    breakdown = skill_match_breakdown(POOL[0])
    assert breakdown["counts"] == {"exact": 2, "semantic": 1, "partial": 0}
    assert breakdown["skills"][2].name == "React.js"


# ═══════════════════════════════════════════════════════════════════════════
# INSIGHTS
# ═══════════════════════════════════════════════════════════════════════════

def test_build_insight_summary():
    ranked = sort_matches(POOL, "overall")
    summary = build_insight_summary(ranked, ["Python", "SQL", "Kubernetes"])

    assert summary.total_count == 3
    assert summary.top_candidate.candidate_id == "a"
    assert summary.top_candidate.match_score == 90
    assert summary.top_candidate.matched_count == 3
    assert summary.top_candidate.required_count == 3
    assert [e.skill for e in summary.coverage] == ["Kubernetes", "SQL", "Python"]
    assert summary.skill_gaps == ["Kubernetes"]
    assert summary.most_covered.skill == "Python"
    assert summary.least_covered.skill == "Kubernetes"
    assert summary.lines[0] == "Based on your job requirements, we've identified 3 potential candidates."
    assert "Top Candidate: Candidate a" in summary.lines
    assert summary.recommendation.startswith("Consider broadening")
    assert summary.strengths == []
    assert summary.coverage_recommendation.startswith("Action Needed")


def test_build_insight_summary_empty():
    summary = build_insight_summary([], ["SQL"])
    assert summary.total_count == 0
    assert summary.top_candidate is None
    assert summary.most_covered is None
    assert summary.skill_gaps == ["SQL"]


def test_build_insight_summary_full_coverage():
    summary = build_insight_summary([_record("a", 80, matched=["SQL"])], ["SQL"])
    assert summary.skill_gaps == []
    assert summary.least_covered is None
    assert summary.recommendation == "Your candidate pool has good coverage of the required skills."
    # tutte le skill sopra soglia: nessuna "strength" da evidenziare
    assert summary.strengths == []
    assert summary.coverage_recommendation.startswith("Good News: Strong overall skill coverage (100%)")


def test_build_insight_summary_strengths_and_overall_advice():
    pool = [
        _record("x", 90, matched=["SQL", "Python"]),
        _record("y", 70, matched=["SQL", "Python (semantic)"]),
        _record("z", 50, matched=["SQL"]),
    ]
    summary = build_insight_summary(pool, ["SQL", "Python", "Rust"])

    assert summary.strengths == ["SQL"]
    assert summary.match_distribution == {"exact": 4, "fuzzy": 1, "missing": 4}
    assert summary.average_coverage == 56
    assert summary.coverage_recommendation.startswith("Suggestion: Moderate skill coverage (56%)")
    assert "Strengths: Your candidate pool shows strong coverage for SQL." in summary.lines
    assert summary.lines[-1] == summary.coverage_recommendation


def test_build_insight_summary_without_required_skills():
    summary = build_insight_summary(POOL, [])
    assert summary.coverage == []
    assert summary.strengths == []
    assert summary.average_coverage == 0
    assert summary.coverage_recommendation == ""
    assert summary.match_distribution == {"exact": 0, "fuzzy": 0, "missing": 0}


def test_coverage_recommendation_thresholds():
    assert coverage_recommendation(39).startswith("Action Needed: Overall skill coverage is low (39%)")
    assert coverage_recommendation(40).startswith("Suggestion:")
    assert coverage_recommendation(59).startswith("Suggestion:")
    assert coverage_recommendation(60).startswith("Good News: Strong overall skill coverage (60%)")
