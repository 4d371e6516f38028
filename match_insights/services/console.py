"""
Output console per client, orchestrator e report.

Log verbose per componente ("[PortalClient] ...") e rendering testuale del
pannello insights: intestazioni, barre di copertura e distribuzione dei match.
"""

from typing import Callable, Dict, Optional

from match_insights.models.insights import CoverageEntry

LogFn = Callable[[str], None]

BAR_EXACT = "#"
BAR_FUZZY = "~"
BAR_MISSING = "."


def log_component(component: str, message: Optional[str], enabled: bool = True) -> None:
    """Stampa message riga per riga con il tag del componente."""
    if not enabled:
        return
    tag = f"[{component}]"
    text = "" if message is None else str(message)
    for line in text.splitlines() or [""]:
        print(f"{tag} {line}".rstrip())


def print_heading(title: str, log_fn: LogFn = print, width: int = 70, char: str = "=") -> None:
    rule = char * width
    for line in (rule, title, rule):
        log_fn(line)


def _segment(count: int, total: int, width: int) -> int:
    if total <= 0:
        return 0
    return int(width * max(0, count) / total + 0.5)


def format_coverage_bar(entry: CoverageEntry, total: int, width: int = 20) -> str:
    """
    Barra di copertura di una skill: "#" match esatti, "~" semantic/partial, "." mancanti.

        SQL                      [##########~~~~~.....] 3/4 (75%)
    """
    exact = min(width, _segment(entry.exact_count, total, width))
    fuzzy = min(width - exact, _segment(entry.count, total, width) - exact)
    fuzzy = max(0, fuzzy)
    bar = BAR_EXACT * exact + BAR_FUZZY * fuzzy + BAR_MISSING * (width - exact - fuzzy)
    return f"{entry.skill:<24} [{bar}] {entry.count}/{total} ({entry.percentage}%)"


def format_distribution(distribution: Dict[str, int]) -> str:
    """Totali exact/fuzzy/missing su una riga, con la quota percentuale di ognuno."""
    keys = ("exact", "fuzzy", "missing")
    total = sum(distribution.get(k, 0) for k in keys)
    parts = []
    for key in keys:
        value = distribution.get(key, 0)
        share = int(value / total * 100 + 0.5) if total else 0
        parts.append(f"{key} {value} ({share}%)")
    return " | ".join(parts)
