"""
Skill Parser
Interpreta le stringhe skill restituite dal backend.

Il backend segnala i match non esatti concatenando un suffisso al nome
("React.js (semantic)", "Java (partial)"). Qui il suffisso viene separato
dal nome e trasformato in un SkillMatch strutturato.
"""

from typing import Iterable, Optional

from match_insights.models.skill import SkillMatch

ANNOTATION_SUFFIXES = {
    " (semantic)": "semantic",
    " (partial)": "partial",
}


def strip_annotation(skill: Optional[str]) -> str:
    """Rimuove i suffissi " (semantic)" / " (partial)" dal nome skill."""
    text = "" if skill is None else str(skill)
    for suffix in ANNOTATION_SUFFIXES:
        text = text.replace(suffix, "")
    return text.strip()


def parse_skill(skill: Optional[str]) -> SkillMatch:
    """Separa nome e tipo di match ("exact" se non annotata)."""
    text = "" if skill is None else str(skill)
    match_type = "exact"
    for suffix, label in ANNOTATION_SUFFIXES.items():
        if suffix in text:
            match_type = label
            break
    return SkillMatch(name=strip_annotation(text), match_type=match_type)


def normalize_skill(skill: Optional[str]) -> str:
    return strip_annotation(skill).lower()


def skill_matches(entry: Optional[str], skill: Optional[str]) -> bool:
    """
    Match permissivo tra una skill del candidato e una skill cercata.

    Entrambe le stringhe vengono ripulite dal suffisso e portate in minuscolo;
    il match riesce se una contiene l'altra ("JS" vs "JavaScript (semantic)").
    Stringhe vuote non matchano mai.
    """
    left = normalize_skill(entry)
    right = normalize_skill(skill)
    if not left or not right:
        return False
    return right in left or left in right


def has_skill(matched_skills: Iterable[str], skill: Optional[str]) -> bool:
    return any(skill_matches(entry, skill) for entry in matched_skills or [])
