"""
API request/response schemas.

Pydantic models for API validation and serialization. Request bodies keep
the camelCase keys used by the study front end. Required fields are
declared Optional; completeness is checked by the turn pipeline
and the routes, which answer with a {"error": ...} body.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.domain.models.progress import SequencerState
from src.domain.models.turn import Message


# ============ TURN SCHEMAS ============


class HistoryMessageSchema(BaseModel):
    """One prior conversation message as sent by the client."""

    role: str
    text: str


class GenerateResponseRequest(BaseModel):
    """Request to submit a prompt for a task."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userID")
    task_id: Optional[int] = Field(default=None, alias="taskID")
    prompt: Optional[str] = None
    task_description: Optional[str] = Field(default=None, alias="taskDescription")
    task_name: Optional[str] = Field(default=None, alias="taskName")
    conversation_history: Optional[List[HistoryMessageSchema]] = Field(
        default_factory=list, alias="conversationHistory"
    )

    def history_messages(self) -> List[Message]:
        return [Message(role=m.role, text=m.text) for m in self.conversation_history or []]


class GenerateResponseResponse(BaseModel):
    """Successful prompt submission."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    response: str
    turn_number: int = Field(alias="turnNumber")


class TurnSchema(BaseModel):
    """Stored turn as returned by get-prompts."""

    id: Optional[int] = None
    user_id: str
    task_id: int
    turn_number: int
    prompt_text: str
    response_text: str
    created_at: datetime


class TurnListResponse(BaseModel):
    data: List[TurnSchema]


# ============ USER/TASK SCHEMAS ============


class UserTaskRequest(BaseModel):
    """Request scoped to a participant and a task."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userID")
    task_id: Optional[int] = Field(default=None, alias="taskId")


class UserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userID")


class TaskRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    task_id: Optional[int] = Field(default=None, alias="taskId")


class CreateUserRequest(BaseModel):
    id: Optional[str] = None


class CompletedTasksResponse(BaseModel):
    data: List[int]


class TaskSchema(BaseModel):
    """Task with its description rendered for display."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    description: str
    description_html: str = Field(alias="descriptionHtml")


class TaskResponse(BaseModel):
    data: TaskSchema


class CreateUserResponse(BaseModel):
    success: bool
    error: Optional[str] = None


# ============ SEQUENCE SCHEMAS ============


class SequencerStateSchema(BaseModel):
    """Sequencer state: a task id, or the terminal complete state."""

    model_config = ConfigDict(populate_by_name=True)

    kind: str
    task_id: Optional[int] = Field(default=None, alias="taskId")

    @classmethod
    def from_state(cls, state: SequencerState) -> "SequencerStateSchema":
        return cls(kind=state.kind.value, task_id=state.task_id)


class TaskAccessSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    task_id: int = Field(alias="taskId")
    accessible: bool
    required_task_id: Optional[int] = Field(default=None, alias="requiredTaskId")
    next: SequencerStateSchema
    total_tasks: int = Field(alias="totalTasks")


class TaskAccessResponse(BaseModel):
    data: TaskAccessSchema


class SequencerStateResponse(BaseModel):
    data: SequencerStateSchema
