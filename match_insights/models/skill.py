from pydantic import BaseModel, ConfigDict

MATCH_TYPES = ("exact", "semantic", "partial")


class SkillMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    match_type: str = "exact"  # "exact", "semantic", "partial"

    @property
    def is_fuzzy(self) -> bool:
        return self.match_type != "exact"
