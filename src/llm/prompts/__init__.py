# noqa
from src.llm.prompts.study import (
    SYSTEM_INSTRUCTION,
    format_task_context,
    get_system_block,
    get_task_context_block,
)

__all__ = [
    "SYSTEM_INSTRUCTION",
    "format_task_context",
    "get_system_block",
    "get_task_context_block",
]
