"""
Study API routes.

Endpoints for prompt submission, conversation replay, task lookup,
participant registration and task sequence gating.
"""

from fastapi import APIRouter
import structlog

from src.api.dependencies import (
    CompletionTrackerDep,
    ConversationServiceDep,
    TaskSequencerDep,
    TaskServiceDep,
    UserRepoDep,
)
from src.api.schemas import (
    CompletedTasksResponse,
    CreateUserRequest,
    CreateUserResponse,
    GenerateResponseRequest,
    GenerateResponseResponse,
    SequencerStateResponse,
    SequencerStateSchema,
    TaskAccessResponse,
    TaskAccessSchema,
    TaskRequest,
    TaskResponse,
    TaskSchema,
    TurnListResponse,
    TurnSchema,
    UserRequest,
    UserTaskRequest,
)
from src.core.exceptions import PersistenceError, ValidationError
from src.services.task_service import format_task_description

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["study"])


def _require(**fields) -> None:
    missing = [name for name, value in fields.items() if value is None or value == ""]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


# ============ CONVERSATION ============


@router.post("/generate-response", response_model=GenerateResponseResponse)
async def generate_response(
    request: GenerateResponseRequest,
    service: ConversationServiceDep,
):
    """Submit a prompt and return the model response.

    The prompt and response are stored together as the next turn for
    (userID, taskID) before the response is returned.
    """
    result = await service.submit_prompt(
        user_id=request.user_id,
        task_id=request.task_id,
        prompt=request.prompt,
        conversation_history=request.history_messages(),
        task_name=request.task_name,
        task_description=request.task_description,
    )

    return GenerateResponseResponse(
        response=result.response_text,
        turn_number=result.turn_number,
    )


@router.post("/get-prompts", response_model=TurnListResponse)
async def get_prompts(
    request: UserTaskRequest,
    service: ConversationServiceDep,
):
    """Stored turns for (userID, taskId), ordered by turn number."""
    _require(userID=request.user_id, taskId=request.task_id)

    turns = await service.list_turns(request.user_id, request.task_id)
    return TurnListResponse(
        data=[TurnSchema(**turn.model_dump()) for turn in turns]
    )


@router.post("/get-completed-tasks", response_model=CompletedTasksResponse)
async def get_completed_tasks(
    request: UserRequest,
    tracker: CompletionTrackerDep,
):
    """Task ids with at least one stored turn, ascending."""
    _require(userID=request.user_id)

    completed = await tracker.completed_task_ids(request.user_id)
    return CompletedTasksResponse(data=sorted(completed))


# ============ TASKS ============


@router.post("/get-task", response_model=TaskResponse)
async def get_task(
    request: TaskRequest,
    service: TaskServiceDep,
):
    """Task details with the description rendered as HTML."""
    _require(taskId=request.task_id)

    task = await service.get_task(request.task_id)
    return TaskResponse(
        data=TaskSchema(
            id=task.id,
            name=task.name,
            description=task.description,
            description_html=format_task_description(task.description),
        )
    )


@router.post("/task-access", response_model=TaskAccessResponse)
async def task_access(
    request: UserTaskRequest,
    sequencer: TaskSequencerDep,
):
    """Whether the participant may open a task, and where it leads."""
    _require(userID=request.user_id, taskId=request.task_id)

    access = await sequencer.access(request.user_id, request.task_id)
    return TaskAccessResponse(
        data=TaskAccessSchema(
            task_id=access.task_id,
            accessible=access.accessible,
            required_task_id=access.required_task_id,
            next=SequencerStateSchema.from_state(access.next),
            total_tasks=access.total_tasks,
        )
    )


@router.post("/advance-task", response_model=SequencerStateResponse)
async def advance_task(
    request: UserTaskRequest,
    sequencer: TaskSequencerDep,
):
    """Move forward from a task that has at least one turn."""
    _require(userID=request.user_id, taskId=request.task_id)

    state = await sequencer.advance(request.user_id, request.task_id)
    return SequencerStateResponse(data=SequencerStateSchema.from_state(state))


# ============ PARTICIPANTS ============


@router.post(
    "/create-user",
    response_model=CreateUserResponse,
    response_model_exclude_none=True,
)
async def create_user(
    request: CreateUserRequest,
    user_repo: UserRepoDep,
):
    """Register a participant id.

    Failures are reported in the body ({"success": false, "error": ...})
    rather than through the status code.
    """
    if not request.id:
        return CreateUserResponse(success=False, error="Missing required fields: id")

    try:
        await user_repo.create(request.id)
    except PersistenceError as e:
        log.warning("user_registration_failed", user_id=request.id, error=e.message)
        return CreateUserResponse(success=False, error=e.message)

    return CreateUserResponse(success=True)
