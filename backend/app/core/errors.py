"""Domain errors for roadmap generation, editing and matching.

Every error is raised before any state is touched, so callers never
observe a partially updated roadmap or history.
"""


class RoadmapError(Exception):
    """Base error. ``operation`` names what failed (generation, save, fetch, match)."""

    def __init__(self, message: str, *, operation: str) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation

    def __str__(self) -> str:
        return f"{self.operation} failed: {self.message}"


class NotFoundError(RoadmapError):
    """A project, phase, milestone or contractor id did not resolve."""


class InvalidFieldValueError(RoadmapError):
    """An edit named an unknown field or carried a disallowed value."""


class InvalidGenerationResultError(RoadmapError):
    """The generator's reply could not be coerced into a roadmap."""


class GenerationUnavailableError(RoadmapError):
    """The generation collaborator could not be reached or errored out."""


class ConflictError(RoadmapError):
    """A save was based on a roadmap version that is no longer current."""

    def __init__(self, message: str, *, operation: str, current_version: int) -> None:
        super().__init__(message, operation=operation)
        self.current_version = current_version
