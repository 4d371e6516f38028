import argparse
import csv
import json
import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from dotenv import load_dotenv

load_dotenv()

from match_insights.aggregator import (
    build_insight_summary,
    classify_match_quality,
    classify_skill_coverage,
    filter_by_score_range,
    filter_by_skills,
    skill_match_breakdown,
    sort_matches,
)
from match_insights.models import MatchRecord, VacancyRequirement
from match_insights.services.console import print_heading
from match_insights.services.portal_client import PortalClient


FIELDNAMES = [
    "run_id",
    "timestamp_utc",
    "source",
    "vacancy_id",
    "vacancy_title",
    "min_score",
    "max_score",
    "sort_key",
    "skill_filters_json",
    "n_required",
    "n_loaded",
    "n_filtered",
    "top_candidate",
    "top_score",
    "mean_score",
    "median_score",
    "n_skill_gaps",
    "n_match_exact",
    "n_match_semantic",
    "n_match_partial",
    "skill_gaps_json",
    "coverage_json",
    "average_coverage",
    "recommendation",
    "elapsed_ms",
    "error",
]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _json_dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _load_export(path: Path) -> Dict[str, Any]:
    """Legge un export JSON {vacancy: {...}, matches: [...]}."""
    data = json.loads(path.read_text(encoding="utf-8", errors="replace"))
    if not isinstance(data, dict):
        raise ValueError(f"Formato non valido in {path.name}: atteso un oggetto JSON")
    return data


def _empty_row(run_id: str, source: str, args: argparse.Namespace) -> Dict[str, Any]:
    row = {key: "" for key in FIELDNAMES}
    row.update({
        "run_id": run_id,
        "timestamp_utc": _utc_now_iso(),
        "source": source,
        "min_score": float(args.min_score),
        "max_score": float(args.max_score),
        "sort_key": args.sort_key,
        "skill_filters_json": _json_dumps(args.skill or []),
    })
    return row


def summarize_vacancy(
    vacancy: VacancyRequirement,
    records: List[MatchRecord],
    min_score: float = 0.0,
    max_score: float = 100.0,
    sort_key: str = "overall",
    skills: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Calcola i campi report di una vacancy (vista filtrata + insights)."""
    view = filter_by_score_range(records, min_score, max_score)
    view = filter_by_skills(view, skills or [])
    view = sort_matches(view, sort_key)
    insights = build_insight_summary(view, vacancy.required_skills)

    scores = np.array([r.match_score for r in view], dtype=float)
    type_counts = {"exact": 0, "semantic": 0, "partial": 0}
    for record in view:
        for match_type, count in skill_match_breakdown(record)["counts"].items():
            type_counts[match_type] += count

    top = insights.top_candidate
    return {
        "vacancy_id": vacancy.id or "",
        "vacancy_title": vacancy.title or "",
        "n_required": len(vacancy.required_skills),
        "n_loaded": len(records),
        "n_filtered": len(view),
        "top_candidate": top.name if top else "",
        "top_score": top.match_score if top else "",
        "mean_score": round(float(np.mean(scores)), 2) if scores.size else "",
        "median_score": round(float(np.median(scores)), 2) if scores.size else "",
        "n_skill_gaps": len(insights.skill_gaps),
        "n_match_exact": type_counts["exact"],
        "n_match_semantic": type_counts["semantic"],
        "n_match_partial": type_counts["partial"],
        "skill_gaps_json": _json_dumps(insights.skill_gaps),
        "coverage_json": _json_dumps([
            {
                "skill": e.skill,
                "count": e.count,
                "percentage": e.percentage,
                "exact": e.exact_count,
                "fuzzy": e.fuzzy_count,
            }
            for e in insights.coverage
        ]),
        "average_coverage": insights.average_coverage,
        "recommendation": insights.recommendation,
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description=(
            "Calcola copertura skill e insights per una o più vacancy e salva "
            "un CSV di riepilogo con statistiche aggregate."
        )
    )
    parser.add_argument("--vacancy-id", action="append", default=[], help="ID vacancy da scaricare dal portal (ripetibile).")
    parser.add_argument("--exports-dir", default=None, help="Directory con export JSON {vacancy, matches}.")
    parser.add_argument("--out", default="data/reports/insights.csv", help="Percorso output CSV.")
    parser.add_argument("--min-score", type=float, default=0.0, help="Score minimo dei match.")
    parser.add_argument("--max-score", type=float, default=100.0, help="Score massimo dei match.")
    parser.add_argument("--sort-key", choices=["overall", "skills", "experience", "education"], default="overall")
    parser.add_argument("--skill", action="append", default=[], help="Skill richiesta a ogni candidato (ripetibile).")
    parser.add_argument("--verbose", action="store_true", help="Abilita log verbose del client.")

    parser.add_argument("--api-url", default=os.getenv("RECRUITMENT_API_URL", "http://localhost:3001/api"))
    parser.add_argument("--api-token", default=os.getenv("RECRUITMENT_API_TOKEN"))
    parser.add_argument("--timeout", type=float, default=float(os.getenv("RECRUITMENT_API_TIMEOUT", "15")))

    args = parser.parse_args(argv)

    export_paths: List[Path] = []
    if args.exports_dir:
        export_paths = sorted(Path(args.exports_dir).resolve().glob("*.json"))

    if not args.vacancy_id and not export_paths:
        raise SystemExit("Nessuna vacancy: usa --vacancy-id oppure --exports-dir con file JSON.")

    out_path = Path(args.out).resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)

    client = None
    if args.vacancy_id:
        client = PortalClient(
            base_url=args.api_url,
            token=args.api_token,
            timeout=args.timeout,
            verbose=args.verbose,
        )

    run_id = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    write_header = not out_path.exists()
    processed = 0

    sources = [("api", vid) for vid in args.vacancy_id] + [("file", str(p)) for p in export_paths]

    with out_path.open("a", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        if write_header:
            writer.writeheader()

        for kind, ref in sources:
            started = time.perf_counter()
            label = ref if kind == "api" else Path(ref).name
            row = _empty_row(run_id, f"{kind}:{label}", args)

            try:
                if kind == "api":
                    vacancy = client.get_vacancy(ref)
                    records = client.get_vacancy_matches(ref)
                else:
                    data = _load_export(Path(ref))
                    vacancy = VacancyRequirement.from_wire(data.get("vacancy") or {})
                    records = [MatchRecord.from_wire(m) for m in data.get("matches") or []]

                row.update(summarize_vacancy(
                    vacancy,
                    records,
                    min_score=args.min_score,
                    max_score=args.max_score,
                    sort_key=args.sort_key,
                    skills=args.skill,
                ))
            except Exception as e:
                row["error"] = f"{type(e).__name__}: {e}"
            finally:
                row["elapsed_ms"] = int((time.perf_counter() - started) * 1000)
                writer.writerow(row)
                f.flush()
                processed += 1
                if row["error"]:
                    print(f"  [{processed}] ERRORE {label}: {row['error']}")
                else:
                    print(f"  [{processed}] OK {label} -> {row['n_filtered']} match, {row['n_skill_gaps']} gap")

    stats_path = out_path.parent / f"{out_path.stem}_stats.csv"
    coverage_path = out_path.parent / f"{out_path.stem}_coverage.csv"
    generate_report_stats(out_path, stats_path, coverage_path)

    return 0


# ═══════════════════════════════════════════════════════════════════════
# STATISTICHE AGGREGATE
# ═══════════════════════════════════════════════════════════════════════

def _coverage_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Una riga per (vacancy, skill) a partire dalla colonna coverage_json."""
    rows = []
    for _, r in df.iterrows():
        for entry in json.loads(r["coverage_json"] or "[]"):
            rows.append({
                "vacancy_id": r["vacancy_id"],
                "skill": entry["skill"],
                "count": entry["count"],
                "percentage": entry["percentage"],
                "exact": entry.get("exact", 0),
                "fuzzy": entry.get("fuzzy", 0),
                "coverage_tier": classify_skill_coverage(entry["percentage"]),
            })
    return pd.DataFrame(
        rows,
        columns=["vacancy_id", "skill", "count", "percentage", "exact", "fuzzy", "coverage_tier"],
    )


def generate_report_stats(csv_path: Path, stats_path: Path, coverage_path: Path) -> None:
    """Genera il CSV di statistiche e quello di copertura per skill."""
    if not csv_path.exists():
        return

    df = pd.read_csv(csv_path, dtype={"vacancy_id": str, "error": str}, keep_default_na=False)
    if df.empty:
        print("\nNessun risultato nel CSV.")
        return

    ok = df[df["error"] == ""].copy()
    stats: List[Dict[str, str]] = []

    def _add(section: str, metric: str, value: Any) -> None:
        stats.append({"section": section, "metric": metric, "value": str(value)})

    # — Overview —
    _add("overview", "total_vacancies", len(df))
    _add("overview", "ok_vacancies", len(ok))
    _add("overview", "error_vacancies", len(df) - len(ok))

    # — Top score —
    top_scores = pd.to_numeric(ok["top_score"], errors="coerce").dropna()
    if not top_scores.empty:
        desc = top_scores.describe()
        for metric in ("mean", "std", "min", "max"):
            value = desc[metric]
            _add("top_score", metric, f"{0.0 if np.isnan(value) else value:.2f}")
        _add("top_score", "median", f"{float(np.median(top_scores)):.2f}")

        tiers = top_scores.map(classify_match_quality).value_counts()
        for tier in ("low", "medium", "high"):
            _add("top_score_quality", tier, int(tiers.get(tier, 0)))

    # — Pool —
    for column in ("n_loaded", "n_filtered", "n_skill_gaps"):
        values = pd.to_numeric(ok[column], errors="coerce").dropna()
        if not values.empty:
            _add("pool", f"{column}_mean", f"{values.mean():.2f}")

    # — Match types —
    type_columns = ["n_match_exact", "n_match_semantic", "n_match_partial"]
    totals = {c: int(pd.to_numeric(ok[c], errors="coerce").fillna(0).sum()) for c in type_columns}
    total_all = sum(totals.values())
    for column, value in totals.items():
        label = column.replace("n_match_", "")
        _add("match_type", f"total_{label}", value)
        _add("match_type", f"pct_{label}", f"{value / total_all * 100:.1f}" if total_all else "0")

    # — Copertura skill —
    coverage = _coverage_frame(ok)
    if not coverage.empty:
        coverage.to_csv(coverage_path, index=False)
        per_skill = coverage.groupby("skill")["percentage"].mean().sort_values()
        for skill, pct in per_skill.items():
            _add("skill_coverage", f"{skill}|mean_pct", f"{pct:.1f}")

    stats_path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(stats, columns=["section", "metric", "value"]).to_csv(stats_path, index=False)

    print()
    print_heading("  SUMMARY – Match Insights Report")
    print(f"  Vacancy: {len(df)} totali ({len(ok)} OK, {len(df) - len(ok)} errori)")
    if not top_scores.empty:
        print(f"  Top score: media={top_scores.mean():.1f}  mediana={float(np.median(top_scores)):.1f}  "
              f"min={top_scores.min():.1f}  max={top_scores.max():.1f}")
    if total_all:
        parts = [f"{c.replace('n_match_', '')}={v}" for c, v in totals.items() if v]
        print(f"  Match types ({total_all} tot): {', '.join(parts)}")
    print(f"  Output CSV:   {csv_path}")
    print(f"  Stats CSV:    {stats_path}")
    if not coverage.empty:
        print(f"  Coverage CSV: {coverage_path}")
    print("=" * 70)


if __name__ == "__main__":
    raise SystemExit(main())
