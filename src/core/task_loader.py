"""Task catalog loader for the study task YAML file.

Loads the fixed sequence of study tasks from YAML. The catalog is only used
to pre-seed the tasks table; at runtime tasks are read from the store.
"""

from pathlib import Path
from typing import List, Optional

import structlog
import yaml

from src.core.config import settings
from src.domain.models.task import Task

log = structlog.get_logger(__name__)


def load_task_catalog(path: Optional[Path] = None) -> List[Task]:
    """Load the task catalog from a YAML file.

    Expected structure:

        tasks:
          - id: 1
            name: "Warm-up"
            description: "Ask the assistant ...\\n**Goal:** ..."

    Args:
        path: Catalog file (defaults to settings.tasks_file)

    Returns:
        Tasks ordered by id

    Raises:
        FileNotFoundError: Catalog file not found
        ValueError: Invalid YAML structure or duplicate task ids
    """
    path = Path(path or settings.tasks_file)
    if not path.exists():
        raise FileNotFoundError(f"Task catalog not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    entries = data.get("tasks")
    if not isinstance(entries, list) or not entries:
        raise ValueError(f"Task catalog {path} must define a non-empty 'tasks' list")

    tasks = [Task(**entry) for entry in entries]

    ids = [task.id for task in tasks]
    if len(set(ids)) != len(ids):
        raise ValueError(f"Task catalog {path} contains duplicate task ids")

    log.debug("task_catalog_loaded", path=str(path), task_count=len(tasks))

    return sorted(tasks, key=lambda t: t.id)
