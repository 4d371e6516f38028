"""
Portal Client
Client HTTP per le API del recruitment portal che forniscono vacancy e match.

Endpoint usati:
- GET  /companies/vacancies/{id}
- POST /companies/vacancies/{id}/match   (con filtri, preferito)
- GET  /companies/vacancies/{id}/matches (fallback)
"""

import json
import os
from typing import Any, Dict, List, Optional, Sequence

import requests

from match_insights.models.match_record import MatchRecord
from match_insights.models.vacancy import VacancyRequirement
from match_insights.services.console import log_component


class PortalAPIError(Exception):
    """Errore HTTP o di rete verso il backend del portal."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PortalAuthError(PortalAPIError):
    """Token mancante, scaduto o non valido (HTTP 401)."""


class PortalClient:
    """
    Client per le API company del portal.

    Il token viene inviato nell'header "x-auth-token", come fa il frontend.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        verbose: bool = False
    ):
        """
        Args:
            base_url: URL base delle API (default: env RECRUITMENT_API_URL o http://localhost:3001/api)
            token: Token di autenticazione (default: env RECRUITMENT_API_TOKEN)
            timeout: Timeout in secondi (default: env RECRUITMENT_API_TIMEOUT o 15)
            verbose: Se True, stampa le richieste
        """
        self.base_url = (base_url or os.getenv("RECRUITMENT_API_URL", "http://localhost:3001/api")).rstrip("/")
        self.token = token if token is not None else os.getenv("RECRUITMENT_API_TOKEN")
        self.timeout = timeout if timeout is not None else float(os.getenv("RECRUITMENT_API_TIMEOUT", "15"))
        self.verbose = verbose

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.token:
            headers["x-auth-token"] = self.token
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        data = json.dumps(payload) if payload is not None else None
        self._log(f"{method} {url}")

        try:
            response = requests.request(
                method,
                url,
                headers=self._headers(),
                data=data,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise PortalAPIError(f"Portal non raggiungibile ({url}): {e}") from e

        self._log(f"   -> {response.status_code}")

        if response.status_code == 401:
            raise PortalAuthError("Autenticazione scaduta o token non valido", status_code=401)

        if response.status_code >= 400:
            try:
                error_body = response.json()
            except ValueError:
                error_body = response.text
            raise PortalAPIError(
                f"Portal API error ({response.status_code}): {error_body}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise PortalAPIError(
                f"Risposta non JSON da {url}", status_code=response.status_code
            ) from e
        if not isinstance(body, dict):
            raise PortalAPIError(f"Risposta inattesa da {url}: {type(body).__name__}")
        return body

    # ═══════════════════════════════════════════════════════════════
    # ENDPOINT
    # ═══════════════════════════════════════════════════════════════

    def get_vacancy(self, vacancy_id: str) -> VacancyRequirement:
        body = self._request("GET", f"/companies/vacancies/{vacancy_id}")
        vacancy = VacancyRequirement.from_wire(body)
        if vacancy.id is None:
            vacancy = vacancy.model_copy(update={"id": str(vacancy_id)})
        return vacancy

    def get_vacancy_matches(
        self,
        vacancy_id: str,
        min_match_score: float = 0,
        max_match_score: float = 100,
        include_analysis: bool = True,
        fuzzy_matching: bool = True,
        skill_filters: Sequence[str] = (),
        max_results: int = 100,
    ) -> List[MatchRecord]:
        """
        Match dei candidati per una vacancy.

        Prova l'endpoint POST con filtri; se fallisce (errori diversi da 401)
        ricade sull'endpoint GET semplice.
        """
        payload = {
            "minMatchScore": min_match_score,
            "maxMatchScore": max_match_score,
            "includeAnalysis": include_analysis,
            "fuzzyMatching": fuzzy_matching,
            "skillFilters": list(skill_filters),
            "maxResults": max_results,
        }
        try:
            body = self._request("POST", f"/companies/vacancies/{vacancy_id}/match", payload=payload)
        except PortalAuthError:
            raise
        except PortalAPIError as e:
            self._log(f"Fallback su endpoint matches semplice ({e})")
            body = self._request("GET", f"/companies/vacancies/{vacancy_id}/matches")

        matches = body.get("matches") or []
        if not isinstance(matches, list):
            return []
        return [MatchRecord.from_wire(m) for m in matches]

    def get_candidate_match_details(self, vacancy_id: str, candidate_id: str) -> MatchRecord:
        body = self._request("GET", f"/companies/vacancies/{vacancy_id}/matches/{candidate_id}")
        data = body.get("match", body)
        return MatchRecord.from_wire(data)

    def _log(self, message: str) -> None:
        log_component("PortalClient", message, enabled=self.verbose)
