"""Task domain model.

Tasks are pre-seeded, read-only study prompts. Descriptions may embed
literal ``\\n`` escape sequences and ``**bold**`` markers for display.
"""

from pydantic import BaseModel, Field


class Task(BaseModel):
    """Single study task from the catalog."""

    id: int = Field(ge=1, description="Position of the task in the study sequence")
    name: str = Field(min_length=1)
    description: str = ""

    model_config = {"from_attributes": True}
