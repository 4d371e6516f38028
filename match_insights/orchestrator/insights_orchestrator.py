"""
Insights Orchestrator
Carica vacancy e match dal portal e calcola le viste filtrate della dashboard.

Responsabilità:
- Recupera requisiti e match tramite PortalClient
- Conserva uno snapshot immutabile dei record per ogni caricamento
- Gestisce lo stato dei filtri (score minimo, ordinamento, skill selezionate)
- Memoizza le viste: ricalcola solo quando cambiano i filtri o i dati
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from match_insights.aggregator.match_aggregator import (
    DEFAULT_SORT_KEY,
    SORT_FIELDS,
    build_insight_summary,
    filter_by_score_range,
    filter_by_skills,
    sort_matches,
    top_n,
)
from match_insights.models.insights import InsightSummary, MatchFilters
from match_insights.models.match_record import MatchRecord
from match_insights.models.vacancy import SkillFilterState, VacancyRequirement
from match_insights.services.console import (
    format_coverage_bar,
    format_distribution,
    log_component,
    print_heading,
)
from match_insights.services.portal_client import PortalClient


@dataclass
class MatchView:
    """Vista filtrata e ordinata di un pool di match."""
    filters: MatchFilters
    matches: List[MatchRecord]
    insights: InsightSummary
    total_loaded: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.matches

    def top(self, n: int = 3) -> List[MatchRecord]:
        return top_n(self.matches, n)


@dataclass
class VacancySnapshot:
    """Dati di un singolo caricamento: sostituiti interamente al fetch successivo."""
    vacancy: VacancyRequirement
    records: Tuple[MatchRecord, ...] = field(default_factory=tuple)
    generation: int = 0


class InsightsOrchestrator:
    """
    Coordina il fetch dei match e il calcolo delle viste.

    FLUSSO:
    1. load(vacancy_id) -> vacancy + match dal portal
    2. set_score_range / set_sort_key / toggle_skill aggiornano i filtri
    3. view() -> MatchView (memoizzata per combinazione di filtri)
    """

    def __init__(
        self,
        portal_client: Optional[PortalClient] = None,
        verbose: bool = False
    ):
        self.verbose = verbose
        self._portal_client = portal_client

        self._snapshot: Optional[VacancySnapshot] = None
        self._cache: Dict[MatchFilters, MatchView] = {}
        self._generation = 0

        self.min_score: float = 0.0
        self.max_score: float = 100.0
        self.sort_key: str = DEFAULT_SORT_KEY
        self.skill_filter = SkillFilterState()

    @property
    def portal_client(self) -> PortalClient:
        if self._portal_client is None:
            self._portal_client = PortalClient(verbose=self.verbose)
        return self._portal_client

    @property
    def snapshot(self) -> Optional[VacancySnapshot]:
        return self._snapshot

    # ═══════════════════════════════════════════════════════════════
    # CARICAMENTO
    # ═══════════════════════════════════════════════════════════════

    def load(self, vacancy_id: str) -> VacancySnapshot:
        """Recupera vacancy e match dal portal (tutti i match, filtri applicati in locale)."""
        print_heading(f"Loading vacancy {vacancy_id}", self._log, width=60, char="-")
        vacancy = self.portal_client.get_vacancy(vacancy_id)
        self._log(f"   -> {vacancy.title or 'Vacancy'}: {len(vacancy.required_skills)} required skills")

        records = self.portal_client.get_vacancy_matches(
            vacancy_id, min_match_score=0, include_analysis=True
        )
        self._log(f"   -> {len(records)} matches")
        return self.load_data(vacancy, records)

    def load_data(self, vacancy: Any, records: Iterable[Any]) -> VacancySnapshot:
        """Installa un nuovo snapshot da dati già disponibili (es. export JSON)."""
        self._generation += 1
        self._snapshot = VacancySnapshot(
            vacancy=VacancyRequirement.from_wire(vacancy),
            records=tuple(MatchRecord.from_wire(r) for r in records or []),
            generation=self._generation,
        )
        self._cache.clear()
        self.reset_filters()
        return self._snapshot

    # ═══════════════════════════════════════════════════════════════
    # FILTRI
    # ═══════════════════════════════════════════════════════════════

    def reset_filters(self) -> None:
        self.min_score = 0.0
        self.max_score = 100.0
        self.sort_key = DEFAULT_SORT_KEY
        required = self._snapshot.vacancy.required_skills if self._snapshot else []
        self.skill_filter = SkillFilterState.from_required_skills(required)

    def set_score_range(self, min_score: float, max_score: float = 100.0) -> None:
        self.min_score = min_score
        self.max_score = max_score

    def set_sort_key(self, sort_key: str) -> None:
        self.sort_key = sort_key if sort_key in SORT_FIELDS else DEFAULT_SORT_KEY

    def toggle_skill(self, skill: str) -> None:
        self.skill_filter = self.skill_filter.toggle(skill)

    def current_filters(self) -> MatchFilters:
        return MatchFilters(
            min_score=self.min_score,
            max_score=self.max_score,
            sort_key=self.sort_key,
            selected_skills=tuple(self.skill_filter.selected_skills()),
        )

    # ═══════════════════════════════════════════════════════════════
    # VISTE
    # ═══════════════════════════════════════════════════════════════

    def view(self, filters: Optional[MatchFilters] = None) -> MatchView:
        """Vista per i filtri dati (o correnti). Stessi filtri -> stessa istanza."""
        filters = filters or self.current_filters()
        cached = self._cache.get(filters)
        if cached is not None:
            return cached

        snapshot = self._snapshot or VacancySnapshot(vacancy=VacancyRequirement())
        matches = filter_by_score_range(snapshot.records, filters.min_score, filters.max_score)
        matches = filter_by_skills(matches, filters.selected_skills)
        matches = sort_matches(matches, filters.sort_key)
        insights = build_insight_summary(matches, snapshot.vacancy.required_skills)

        view = MatchView(
            filters=filters,
            matches=matches,
            insights=insights,
            total_loaded=len(snapshot.records),
        )
        self._cache[filters] = view
        self._log(f"View: {len(matches)}/{len(snapshot.records)} matches (sort={filters.sort_key})")
        return view

    def print_report(self, view: Optional[MatchView] = None) -> None:
        """Stampa il riepilogo insights e le barre di copertura."""
        view = view or self.view()
        total = len(view.matches)
        print_heading("MATCHING INSIGHTS")
        for line in view.insights.lines:
            print(f"  {line}")
        if view.insights.coverage:
            print_heading("Required Skills Coverage", char="-")
            for entry in view.insights.coverage:
                print("  " + format_coverage_bar(entry, total))
            print("  " + format_distribution(view.insights.match_distribution))

    def _log(self, message: str) -> None:
        log_component("InsightsOrchestrator", message, enabled=self.verbose)


# ═══════════════════════════════════════════════════════════════════════════
# SIMPLE API
# ═══════════════════════════════════════════════════════════════════════════

def vacancy_insights(
    vacancy_id: str,
    min_score: float = 0.0,
    sort_key: str = DEFAULT_SORT_KEY,
    skills: Iterable[str] = (),
    portal_client: Optional[PortalClient] = None,
    verbose: bool = False
) -> MatchView:
    """
    API semplice: carica una vacancy e restituisce la vista filtrata.

    Args:
        vacancy_id: ID della vacancy
        min_score: Score minimo dei match
        sort_key: "overall", "skills", "experience" o "education"
        skills: Skill richieste dalla vacancy che ogni candidato deve possedere
        portal_client: Client da usare (default: da variabili d'ambiente)
        verbose: Se True, stampa log
    """
    orchestrator = InsightsOrchestrator(portal_client=portal_client, verbose=verbose)
    orchestrator.load(vacancy_id)
    orchestrator.set_score_range(min_score)
    orchestrator.set_sort_key(sort_key)
    for skill in skills:
        orchestrator.toggle_skill(skill)
    return orchestrator.view()
