"""RFC 9457 problem details."""

from pydantic import BaseModel

PROBLEM_CONTENT_TYPE = "application/problem+json"
PROBLEM_BASE_URI = "/problems"


class FieldError(BaseModel):
    """Validation error for a single field."""

    field: str
    message: str


class Problem(BaseModel):
    """Problem details body."""

    type: str
    title: str
    status: int
    detail: str | None = None
    errors: list[FieldError] | None = None

    @classmethod
    def build(
        cls,
        status: int,
        problem_type: str,
        title: str,
        detail: str | None = None,
        errors: list[FieldError] | None = None,
    ) -> "Problem":
        return cls(
            type=f"{PROBLEM_BASE_URI}/{problem_type}",
            title=title,
            status=status,
            detail=detail,
            errors=errors or None,
        )
