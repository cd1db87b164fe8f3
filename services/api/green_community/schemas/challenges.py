"""Schemas for challenges and completions."""

from pydantic import BaseModel, Field


class ChallengeOut(BaseModel):
    id: str
    title: str
    description: str
    category: str
    difficulty: str
    points: int
    completed: bool = False

    model_config = {"from_attributes": True}


class CompletionCreate(BaseModel):
    proof_image_url: str | None = None
    notes: str | None = Field(default=None, max_length=2000)


class CompletionResult(BaseModel):
    challenge_id: str
    points_awarded: int
    green_points: int
