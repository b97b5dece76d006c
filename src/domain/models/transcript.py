"""Model-facing transcript built from tagged blocks.

The transcript is the ordered list of role-tagged text blocks sent to the
language model for one invocation. It is always assembled in this order:

    SystemBlock, TaskContextBlock (optional), HistoryBlock*, PromptBlock

Every block becomes an independent entry of the provider request. History
is never truncated or summarized.
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, Field

from src.domain.models.turn import Message, Role


class TranscriptRole(str, Enum):
    """Provider-facing role. Anything that is not the user is the model."""

    USER = "user"
    MODEL = "model"

    @classmethod
    def from_message_role(cls, role: str) -> "TranscriptRole":
        """Map a conversation role onto the transcript role."""
        return cls.USER if role == Role.USER.value else cls.MODEL


class SystemBlock(BaseModel):
    """Fixed, task-independent instruction block."""

    kind: Literal["system"] = "system"
    role: TranscriptRole = TranscriptRole.USER
    text: str


class TaskContextBlock(BaseModel):
    """Task id, name and description the participant is working on."""

    kind: Literal["task_context"] = "task_context"
    role: TranscriptRole = TranscriptRole.USER
    task_id: int
    task_name: Optional[str] = None
    task_description: Optional[str] = None
    text: str


class HistoryBlock(BaseModel):
    """One earlier message of the conversation."""

    kind: Literal["history"] = "history"
    role: TranscriptRole
    text: str


class PromptBlock(BaseModel):
    """The new participant prompt. Always the final block."""

    kind: Literal["prompt"] = "prompt"
    role: TranscriptRole = TranscriptRole.USER
    text: str


TranscriptBlock = Annotated[
    Union[SystemBlock, TaskContextBlock, HistoryBlock, PromptBlock],
    Field(discriminator="kind"),
]


class Transcript(BaseModel):
    """Ordered transcript for a single model call."""

    blocks: List[TranscriptBlock] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        system: SystemBlock,
        history: Sequence[Message],
        prompt: str,
        task_context: Optional[TaskContextBlock] = None,
    ) -> "Transcript":
        """Assemble blocks in the fixed order.

        Args:
            system: Instruction block, always first
            history: Earlier messages in conversation order
            prompt: New prompt text, always last
            task_context: Included right after the system block when given

        Returns:
            Transcript with one block per entry
        """
        blocks: List[TranscriptBlock] = [system]
        if task_context is not None:
            blocks.append(task_context)
        for message in history:
            blocks.append(
                HistoryBlock(
                    role=TranscriptRole.from_message_role(message.role),
                    text=message.text,
                )
            )
        blocks.append(PromptBlock(text=prompt))
        return cls(blocks=blocks)

    @property
    def history(self) -> List[HistoryBlock]:
        return [b for b in self.blocks if isinstance(b, HistoryBlock)]

    @property
    def prompt(self) -> str:
        return self.blocks[-1].text if self.blocks else ""

    def entries(self) -> List[Tuple[TranscriptRole, str]]:
        """Flatten to (role, text) pairs in send order."""
        return [(b.role, b.text) for b in self.blocks]

    def __len__(self) -> int:
        return len(self.blocks)
