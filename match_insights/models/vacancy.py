from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from match_insights.models.match_record import coerce_skill_list


class VacancyRequirement(BaseModel):
    """Requisiti di una vacancy rilevanti per il calcolo della copertura."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: Optional[str] = None
    title: Optional[str] = None
    required_skills: List[str] = Field(default_factory=list, alias="requiredSkills")

    @field_validator("id", "title", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator("required_skills", mode="before")
    @classmethod
    def _skills(cls, v: Any) -> List[str]:
        return coerce_skill_list(v)

    @classmethod
    def from_wire(cls, data: Any) -> "VacancyRequirement":
        """Accetta sia {vacancy: {...}} che il dizionario vacancy diretto."""
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict):
            return cls()
        if isinstance(data.get("vacancy"), dict):
            data = data["vacancy"]
        payload = dict(data)
        if "id" not in payload and "_id" in payload:
            payload["id"] = payload["_id"]
        return cls.model_validate(payload)


class SkillFilterState(BaseModel):
    """Stato dei checkbox skill: nome skill -> selezionata."""
    model_config = ConfigDict(frozen=True)

    skills: Dict[str, bool] = Field(default_factory=dict)

    @classmethod
    def from_required_skills(cls, required_skills: Iterable[str]) -> "SkillFilterState":
        return cls(skills={name: False for name in coerce_skill_list(required_skills)})

    def toggle(self, name: str) -> "SkillFilterState":
        if name not in self.skills:
            return self
        updated = dict(self.skills)
        updated[name] = not updated[name]
        return SkillFilterState(skills=updated)

    def reset(self) -> "SkillFilterState":
        return SkillFilterState(skills={name: False for name in self.skills})

    def selected_skills(self) -> List[str]:
        return [name for name, selected in self.skills.items() if selected]
