"""Roadmap generation adapter.

Turns a project's description and dates into a request for an external
text-generation model, then coerces the reply into a ``RoadmapDocument``.
Generation is all-or-nothing: any malformed reply raises and nothing is
returned, and nothing here persists.
"""

from datetime import datetime
from typing import Any, Protocol

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel, Field, ValidationError, field_validator

from app.agent.llm import get_llm
from app.agent.llm_utils import message_text, parse_llm_json_response
from app.core.errors import GenerationUnavailableError, InvalidGenerationResultError
from app.core.logging import get_logger
from app.schemas.roadmap import (
    Milestone,
    MilestoneStatus,
    RoadmapDocument,
    RoadmapPhase,
)
from app.services.id_allocator import IdAllocator

logger = get_logger(__name__)

OPERATION = "generation"


class RoadmapGenerationRequest(BaseModel):
    """What the generator is told about the project."""

    project_description: str = Field(min_length=1)
    start_date: datetime
    deadline: datetime

    @field_validator("project_description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("project description must not be blank")
        return value

    def prompt_fields(self) -> dict[str, str]:
        return {
            "projectDescription": self.project_description,
            "startDate": self.start_date.isoformat(),
            "deadline": self.deadline.isoformat(),
        }


class RoadmapGenerator(Protocol):
    """Anything that can produce a roadmap for a project."""

    async def generate(self, request: RoadmapGenerationRequest) -> RoadmapDocument: ...


# ============================================================================
# Reply coercion
# ============================================================================


def _id_as_text(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class _GeneratedMilestone(BaseModel):
    id: str | None = None
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    status: MilestoneStatus | None = None

    _coerce_id = field_validator("id", mode="before")(_id_as_text)


class _GeneratedPhase(BaseModel):
    id: str | None = None
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    milestones: list[_GeneratedMilestone] = Field(min_length=1)

    _coerce_id = field_validator("id", mode="before")(_id_as_text)


class _GeneratedRoadmap(BaseModel):
    phases: list[_GeneratedPhase] = Field(min_length=1)


def _unwrap(payload: Any) -> Any:
    """Accept ``{"roadmap": [...]}``, ``{"phases": [...]}`` or a bare list."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("roadmap", "phases"):
            if key in payload:
                return payload[key]
    raise InvalidGenerationResultError(
        "reply has no 'roadmap' or 'phases' list", operation=OPERATION
    )


def _needs_rekey(generated: _GeneratedRoadmap) -> bool:
    phase_ids = [(phase.id or "").strip() for phase in generated.phases]
    milestone_ids = [(m.id or "").strip() for phase in generated.phases for m in phase.milestones]
    for ids in (phase_ids, milestone_ids):
        if not all(ids):
            return True
        if len(set(ids)) != len(ids):
            return True
    return False


def build_roadmap(payload: Any) -> RoadmapDocument:
    """Validate a parsed generator reply and turn it into a roadmap.

    Every phase needs a name, a description and at least one milestone;
    every milestone needs a name and a description. A status, if given,
    must be one of the three known values, but all milestones start out
    ``Pending`` regardless. When any id is missing, blank or duplicated the
    whole roadmap is re-keyed as p1.., m1.. from a single allocator.

    Raises:
        InvalidGenerationResultError: if the payload cannot be coerced.
    """
    try:
        generated = _GeneratedRoadmap.model_validate({"phases": _unwrap(payload)})
    except ValidationError as exc:
        logger.warning("Rejected generated roadmap", errors=exc.error_count())
        raise InvalidGenerationResultError(
            f"reply does not match the roadmap shape: {exc.errors()[0]['msg']}",
            operation=OPERATION,
        ) from exc

    rekey = _needs_rekey(generated)
    allocator = IdAllocator()
    phases = []
    for phase in generated.phases:
        milestones = [
            Milestone(
                id=allocator.next_milestone_id() if rekey else m.id,
                name=m.name,
                description=m.description,
                status=MilestoneStatus.PENDING,
            )
            for m in phase.milestones
        ]
        phases.append(
            RoadmapPhase(
                id=allocator.next_phase_id() if rekey else phase.id,
                name=phase.name,
                description=phase.description,
                milestones=milestones,
            )
        )

    if rekey:
        logger.info("Re-keyed generated roadmap ids", phases=len(phases))
    return RoadmapDocument(phases=phases)


# ============================================================================
# LLM-backed generator
# ============================================================================

ROADMAP_SYSTEM_PROMPT = """
You are an experienced project manager for construction and software projects.
Plan a roadmap for the project described by the user.

Rules:
1. Split the work into logical, chronologically ordered phases
   (for example Planning, Design, Build, Testing, Handover).
2. Every phase has at least one milestone.
3. Give phases sequential ids p1, p2, ... and milestones sequential ids
   m1, m2, ... that keep counting across phases (never restart at m1).
4. Every milestone starts with status "Pending".
5. Fit the plan between the start date and the deadline.

Reply with JSON only, in exactly this shape:
{
  "roadmap": [
    {
      "id": "p1",
      "name": "Phase 1: Planning & Design",
      "description": "What this phase accomplishes",
      "milestones": [
        {"id": "m1", "name": "Site survey", "description": "What this entails", "status": "Pending"}
      ]
    }
  ]
}
"""


def _user_prompt(request: RoadmapGenerationRequest) -> str:
    fields = request.prompt_fields()
    return (
        f"Project Description: {fields['projectDescription']}\n"
        f"Start Date: {fields['startDate']}\n"
        f"Deadline: {fields['deadline']}"
    )


class LLMRoadmapGenerator:
    """Generates roadmaps with a chat model. One call, no retry."""

    def __init__(self, llm: BaseChatModel | None = None) -> None:
        self._llm = llm

    async def generate(self, request: RoadmapGenerationRequest) -> RoadmapDocument:
        llm = self._llm or get_llm()
        try:
            reply = await llm.ainvoke(
                [
                    SystemMessage(content=ROADMAP_SYSTEM_PROMPT),
                    HumanMessage(content=_user_prompt(request)),
                ]
            )
        except Exception as exc:
            logger.error("Roadmap generator call failed", error=str(exc))
            raise GenerationUnavailableError(
                f"roadmap generator is unavailable: {exc}", operation=OPERATION
            ) from exc

        try:
            payload = parse_llm_json_response(message_text(reply))
        except ValueError as exc:
            raise InvalidGenerationResultError(str(exc), operation=OPERATION) from exc

        roadmap = build_roadmap(payload)
        logger.info(
            "Roadmap generated",
            phases=len(roadmap.phases),
            milestones=len(roadmap.milestone_ids()),
        )
        return roadmap
