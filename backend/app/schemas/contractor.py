"""Contractor profile and matching schemas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContractorProfile(BaseModel):
    """The slice of a contractor that matching needs.

    Records with no ``skills`` or ``location`` are accepted and treated as
    having none.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str = ""
    location: str = ""
    skills: list[str] = Field(default_factory=list)
    professional_title: str | None = None

    @field_validator("location", mode="before")
    @classmethod
    def _none_location(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("skills", mode="before")
    @classmethod
    def _none_skills(cls, value: object) -> object:
        return [] if value is None else value


class ContractorCreate(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    location: str | None = None
    skills: list[str] = Field(default_factory=list)
    professional_title: str | None = None
    bio: str | None = None


class MatchRequirement(BaseModel):
    """Location/skill criteria for a contractor search."""

    location: str | None = None
    required_skills: set[str] = Field(default_factory=set)


class MatchResponse(BaseModel):
    requirement: MatchRequirement
    pool_size: int
    matches: list[ContractorProfile]
