"""Turn and conversation domain models.

A Turn is one persisted prompt/response pair, scoped to a (user, task) pair
and numbered from 1 without gaps. Conversations are never stored: they are
rebuilt from turns, each turn expanding to a user message followed by an
assistant message.

Core Models:
    - Turn: Immutable stored record (prompt and response written together)
    - Message: Role-tagged text used for display and as pipeline history
    - Role: user / assistant
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Speaker role for conversation messages.

    Values:
        - USER: Participant prompt
        - ASSISTANT: Language model response
    """

    USER = "user"
    ASSISTANT = "assistant"


class Turn(BaseModel):
    """Single persisted prompt/response exchange.

    Invariants:
        - turn_number is 1-indexed, strictly increasing and gapless per
          (user_id, task_id); enforced by a unique key in the store
        - prompt_text and response_text are always written together
        - never updated after insert
    """

    id: Optional[int] = None
    user_id: str
    task_id: int = Field(ge=1)
    turn_number: int = Field(ge=1)
    prompt_text: str
    response_text: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"from_attributes": True, "frozen": True}


class Message(BaseModel):
    """Role-tagged conversation entry."""

    role: str
    text: str
    timestamp: Optional[datetime] = None


def conversation_from_turns(turns: Sequence[Turn]) -> List[Message]:
    """Expand stored turns into alternating user/assistant messages.

    Args:
        turns: Turns for one (user, task), any order

    Returns:
        Two messages per turn, ordered by turn_number
    """
    messages: List[Message] = []
    for turn in sorted(turns, key=lambda t: t.turn_number):
        messages.append(
            Message(role=Role.USER.value, text=turn.prompt_text, timestamp=turn.created_at)
        )
        messages.append(
            Message(
                role=Role.ASSISTANT.value,
                text=turn.response_text,
                timestamp=turn.created_at,
            )
        )
    return messages
