"""
Prompts for the study assistant.

The system instruction is fixed and task-independent. The task context
block is rendered from whatever task metadata the client supplied.
"""

from typing import Optional

from src.domain.models.transcript import SystemBlock, TaskContextBlock

SYSTEM_INSTRUCTION = """
You are an AI assistant helping a user solve and reflect on tasks in a research project.
All prompts and responses will be used to analyze user behaviour.
Answer in a clear, structured and helpful way that makes it easy to understand the user's reasoning and problem-solving process. I want to see and analyse how they refine the query and prompt to get the best possible response.
""".strip()

MISSING_VALUE = "N/A"


def get_system_block() -> SystemBlock:
    """Fixed instruction block sent first on every call."""
    return SystemBlock(text=SYSTEM_INSTRUCTION)


def format_task_context(
    task_id: int,
    task_name: Optional[str] = None,
    task_description: Optional[str] = None,
) -> str:
    """
    Render the task context text.

    Args:
        task_id: Task being worked on
        task_name: Task name, "N/A" when missing
        task_description: Task description/question, "N/A" when missing

    Returns:
        Multi-line task context string
    """
    return (
        "Task context:\n"
        f"- Task ID: {task_id}\n"
        f"- Task Name: {task_name or MISSING_VALUE}\n"
        f"- Task Description / Question: {task_description or MISSING_VALUE}"
    )


def get_task_context_block(
    task_id: int,
    task_name: Optional[str] = None,
    task_description: Optional[str] = None,
) -> Optional[TaskContextBlock]:
    """
    Build the task context block, or None when there is nothing to add.

    The block is only included if a task name or description was supplied.
    """
    if not task_name and not task_description:
        return None
    return TaskContextBlock(
        task_id=task_id,
        task_name=task_name,
        task_description=task_description,
        text=format_task_context(task_id, task_name, task_description),
    )
