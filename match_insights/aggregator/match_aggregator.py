"""
Match Aggregator
Funzioni pure su liste di MatchRecord e sulle skill richieste da una vacancy.

Responsabilità:
- Filtri per range di score e per skill selezionate
- Ordinamento (stabile, decrescente) per dimensione di score
- Copertura delle skill richieste nel pool di candidati
- Top-N e riepilogo "insights" per la dashboard

Nessuna funzione modifica i record ricevuti né solleva eccezioni per input
malformati: campi numerici mancanti valgono 0, liste mancanti sono vuote.
"""

import math
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from match_insights.models.insights import CoverageEntry, InsightSummary, TopCandidate
from match_insights.models.match_record import MatchRecord, coerce_score
from match_insights.models.skill import MATCH_TYPES, SkillMatch
from match_insights.models.vacancy import SkillFilterState
from match_insights.services.skill_parser import has_skill, parse_skill, skill_matches

SORT_FIELDS = {
    "overall": "match_score",
    "skills": "skills_score",
    "experience": "experience_score",
    "education": "education_score",
}
DEFAULT_SORT_KEY = "overall"

SKILL_GAP_THRESHOLD = 30
STRENGTH_THRESHOLD = 70
COMPARISON_LIMIT = 4

RecordsInput = Iterable[Union[MatchRecord, Dict[str, Any]]]


def _as_records(records: Optional[RecordsInput]) -> List[MatchRecord]:
    if not records:
        return []
    return [MatchRecord.from_wire(r) for r in records]


def _skill_names(skills: Any) -> List[str]:
    if skills is None:
        return []
    if isinstance(skills, str):
        skills = [skills]
    try:
        names = [str(s).strip() for s in skills if s is not None]
    except TypeError:
        return []
    return [n for n in names if n]


def _selected_skill_names(selected: Any) -> List[str]:
    """Skill selezionate da lista, SkillFilterState o mapping nome -> flag."""
    if isinstance(selected, SkillFilterState):
        return selected.selected_skills()
    if isinstance(selected, Mapping):
        return _skill_names([name for name, flag in selected.items() if flag])
    return _skill_names(selected)


def round_half_up(value: float) -> int:
    """Arrotondamento come Math.round (0.5 verso l'alto), non quello bancario di round()."""
    return int(math.floor(value + 0.5))


# ═══════════════════════════════════════════════════════════════════════════
# FILTRI
# ═══════════════════════════════════════════════════════════════════════════

def filter_by_score_range(
    records: RecordsInput,
    min_score: float = 0,
    max_score: float = 100,
) -> List[MatchRecord]:
    """Record con min_score <= matchScore <= max_score, nell'ordine originale."""
    low, high = coerce_score(min_score), coerce_score(max_score)
    if low > high:
        low, high = high, low
    return [r for r in _as_records(records) if low <= r.match_score <= high]


def filter_by_skills(records: RecordsInput, selected_skills: Any) -> List[MatchRecord]:
    """
    Record che possiedono TUTTE le skill selezionate.

    Il confronto è case-insensitive, ignora i suffissi di annotazione e accetta
    il contenimento in entrambe le direzioni. Nessuna skill selezionata = nessun filtro.
    """
    items = _as_records(records)
    selected = _selected_skill_names(selected_skills)
    if not selected:
        return items
    return [
        r for r in items
        if all(has_skill(r.matched_skills, skill) for skill in selected)
    ]


# ═══════════════════════════════════════════════════════════════════════════
# ORDINAMENTO
# ═══════════════════════════════════════════════════════════════════════════

def sort_matches(records: RecordsInput, sort_key: Optional[str] = DEFAULT_SORT_KEY) -> List[MatchRecord]:
    """Ordina per score decrescente; a parità mantiene l'ordine di input."""
    if not isinstance(sort_key, str) or sort_key not in SORT_FIELDS:
        sort_key = DEFAULT_SORT_KEY
    field_name = SORT_FIELDS[sort_key]
    # sorted() è stabile anche con reverse=True
    return sorted(_as_records(records), key=lambda r: getattr(r, field_name), reverse=True)


def top_n(records: RecordsInput, n: int) -> List[MatchRecord]:
    """Primi n record. Non ordina: l'input deve essere già ordinato."""
    try:
        count = int(n)
    except OverflowError:
        # n = +inf: tutti i record
        if n > 0:
            return _as_records(records)
        return []
    except (TypeError, ValueError):
        return []
    if count <= 0:
        return []
    return _as_records(records)[:count]


# ═══════════════════════════════════════════════════════════════════════════
# COPERTURA SKILL
# ═══════════════════════════════════════════════════════════════════════════

def compute_skill_coverage(records: RecordsInput, required_skills: Iterable[str]) -> List[CoverageEntry]:
    """
    Per ogni skill richiesta: quanti candidati la possiedono e in che percentuale.

    Ordinata per percentuale crescente (prima le skill meno coperte); a parità
    resta l'ordine di required_skills.
    """
    items = _as_records(records)
    total = len(items)
    entries = []
    for skill in _skill_names(required_skills):
        holders = []
        exact = 0
        for record in items:
            hits = [parse_skill(s) for s in record.matched_skills if skill_matches(s, skill)]
            if not hits:
                continue
            holders.append(record.candidate_id)
            # Un solo match esatto basta a contare il candidato come "exact"
            if any(not h.is_fuzzy for h in hits):
                exact += 1
        percentage = round_half_up(len(holders) / total * 100) if total else 0
        entries.append(CoverageEntry(
            skill=skill,
            count=len(holders),
            percentage=percentage,
            exact_count=exact,
            fuzzy_count=len(holders) - exact,
            missing_count=total - len(holders),
            candidates=tuple(holders),
        ))
    return sorted(entries, key=lambda e: e.percentage)


def coverage_distribution(coverage: Iterable[CoverageEntry]) -> Dict[str, int]:
    """Totali del pool su tutte le skill: match esatti, fuzzy e mancanti (grafico a torta)."""
    totals = {"exact": 0, "fuzzy": 0, "missing": 0}
    for entry in coverage:
        totals["exact"] += entry.exact_count
        totals["fuzzy"] += entry.fuzzy_count
        totals["missing"] += entry.missing_count
    return totals


def average_coverage(coverage: Sequence[CoverageEntry]) -> int:
    if not coverage:
        return 0
    return round_half_up(sum(e.percentage for e in coverage) / len(coverage))


def coverage_recommendation(average: int) -> str:
    """Consiglio complessivo in base alla copertura media (soglie 40/60)."""
    if average < 40:
        return (
            f"Action Needed: Overall skill coverage is low ({average}%). Consider adjusting "
            "job requirements or expanding your recruitment channels."
        )
    if average < 60:
        return (
            f"Suggestion: Moderate skill coverage ({average}%). Focus recruitment efforts on "
            "candidates with the skills identified above as gaps."
        )
    return (
        f"Good News: Strong overall skill coverage ({average}%). Your candidate pool aligns "
        "well with your requirements."
    )


def classify_skill_coverage(percentage: float) -> str:
    """Fascia per le barre di copertura skill: <40 low, 40-69 medium, >=70 high."""
    value = coerce_score(percentage)
    if value >= 70:
        return "high"
    if value >= 40:
        return "medium"
    return "low"


def classify_match_quality(percentage: float) -> str:
    """Fascia qualità candidati: <30 low, 30-69 medium, >=70 high."""
    value = coerce_score(percentage)
    if value >= 70:
        return "high"
    if value >= 30:
        return "medium"
    return "low"


def classify_score_color(score: float) -> str:
    """Badge dello score sulle card dei match (80/60/40)."""
    value = coerce_score(score)
    if value >= 80:
        return "excellent"
    if value >= 60:
        return "good"
    if value >= 40:
        return "fair"
    return "poor"


# ═══════════════════════════════════════════════════════════════════════════
# CONFRONTO CANDIDATI
# ═══════════════════════════════════════════════════════════════════════════

def toggle_comparison(
    selected_ids: Sequence[str],
    candidate_id: str,
    limit: int = COMPARISON_LIMIT,
) -> List[str]:
    """Aggiunge o rimuove un candidato dalla selezione, senza superare limit."""
    current = list(selected_ids or [])
    if candidate_id in current:
        return [c for c in current if c != candidate_id]
    if len(current) >= limit:
        return current
    return current + [candidate_id]


def select_for_comparison(records: RecordsInput, selected_ids: Iterable[str]) -> List[MatchRecord]:
    wanted = {str(c) for c in selected_ids or []}
    chosen = [r for r in _as_records(records) if r.candidate_id in wanted]
    return sort_matches(chosen, "overall")


def skill_match_breakdown(record: Union[MatchRecord, Dict[str, Any]]) -> Dict[str, Any]:
    """Skill matchate in forma strutturata e conteggio per tipo di match."""
    item = MatchRecord.from_wire(record)
    skills: List[SkillMatch] = [parse_skill(s) for s in item.matched_skills]
    counts = Counter(s.match_type for s in skills)
    return {
        "skills": skills,
        "counts": {t: counts.get(t, 0) for t in MATCH_TYPES},
    }


# ═══════════════════════════════════════════════════════════════════════════
# INSIGHTS
# ═══════════════════════════════════════════════════════════════════════════

def _top_candidate(record: MatchRecord) -> TopCandidate:
    return TopCandidate(
        candidate_id=record.candidate_id,
        name=record.candidate_name,
        match_score=round_half_up(record.match_score),
        skills_score=round_half_up(record.skills_score),
        experience_score=round_half_up(record.experience_score),
        education_score=round_half_up(record.education_score),
        matched_count=len(record.matched_skills),
        required_count=len(record.matched_skills) + len(record.missing_skills),
    )


def build_insight_summary(records: RecordsInput, required_skills: Iterable[str]) -> InsightSummary:
    """
    Riepilogo per il pannello insights.

    Il top candidate è il primo record: l'ordinamento è responsabilità del chiamante.
    """
    items = _as_records(records)
    coverage = compute_skill_coverage(items, required_skills)
    top = _top_candidate(items[0]) if items else None

    skill_gaps = [e.skill for e in coverage if e.percentage < SKILL_GAP_THRESHOLD]
    most_covered = coverage[-1] if coverage and coverage[-1].percentage > 0 else None
    least_covered = coverage[0] if coverage and coverage[0].percentage < 100 else None

    if skill_gaps:
        recommendation = (
            "Consider broadening your candidate search or adjusting requirements "
            "for hard-to-find skills."
        )
    else:
        recommendation = "Your candidate pool has good coverage of the required skills."

    strong = [e.skill for e in coverage if e.percentage > STRENGTH_THRESHOLD]
    # Se tutte le skill sono sopra soglia non c'è nulla da evidenziare
    strengths = strong if len(strong) < len(coverage) else []
    average = average_coverage(coverage)
    overall_advice = coverage_recommendation(average) if coverage else ""

    lines = [
        f"Based on your job requirements, we've identified {len(items)} potential candidates."
    ]
    if top is not None:
        lines.extend([
            f"Top Candidate: {top.name}",
            f"Overall match score: {top.match_score}%",
            f"Skills match: {top.skills_score}%",
            f"Experience match: {top.experience_score}%",
            f"This candidate matches {top.matched_count} out of {top.required_count} "
            f"required skills for this position.",
        ])
    if most_covered is not None:
        lines.append(
            f"Most covered skill: {most_covered.skill} ({most_covered.percentage}% of candidates)"
        )
    if least_covered is not None:
        lines.append(
            f"Least covered skill: {least_covered.skill} ({least_covered.percentage}% of candidates)"
        )
    if skill_gaps:
        lines.append(f"Skill gaps: {', '.join(skill_gaps)}")
    lines.append(recommendation)
    if strengths:
        lines.append(
            f"Strengths: Your candidate pool shows strong coverage for {', '.join(strengths)}."
        )
    if overall_advice:
        lines.append(overall_advice)

    return InsightSummary(
        total_count=len(items),
        top_candidate=top,
        coverage=coverage,
        skill_gaps=skill_gaps,
        most_covered=most_covered,
        least_covered=least_covered,
        recommendation=recommendation,
        strengths=strengths,
        match_distribution=coverage_distribution(coverage),
        average_coverage=average,
        coverage_recommendation=overall_advice,
        lines=lines,
    )
