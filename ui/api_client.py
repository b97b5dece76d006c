# ui/api_client.py
"""API client for communicating with the study backend.

Supports both synchronous and asynchronous usage patterns:

**Synchronous (for scripts, blocking contexts):**
    client = APIClient()
    result = client.generate_response(...)  # sync call

**Asynchronous (for agents, async frameworks):**
    client = APIClient()
    result = await client.generate_response_async(...)  # async call
"""

from typing import Optional, Dict, Any, List, Sequence
from dataclasses import dataclass

import httpx


@dataclass
class PromptResult:
    """Model response for one submitted prompt."""
    response: str
    turn_number: int


def _history_payload(history: Optional[Sequence[Dict[str, str]]]) -> List[Dict[str, str]]:
    return [{"role": m["role"], "text": m["text"]} for m in (history or [])]


def _generate_payload(
    user_id: str,
    task_id: int,
    prompt: str,
    conversation_history: Optional[Sequence[Dict[str, str]]],
    task_name: Optional[str],
    task_description: Optional[str],
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "userID": user_id,
        "taskID": task_id,
        "prompt": prompt,
        "conversationHistory": _history_payload(conversation_history),
    }
    if task_name is not None:
        payload["taskName"] = task_name
    if task_description is not None:
        payload["taskDescription"] = task_description
    return payload


class APIClient:
    """HTTP client for the Prompt Study API.

    Provides dual sync/async interface:
    - Sync methods: For scripts and blocking contexts
    - Async methods: For agent orchestration and async frameworks

    Args:
        base_url: API base URL (default: http://localhost:8000)
        timeout: Request timeout in seconds (default: 90.0, above the
            server's model timeout)
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 90.0,
        transport: Optional[httpx.BaseTransport] = None,
        async_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize API client."""
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.async_transport = async_transport

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            response = client.post(f"{self.base_url}{path}", json=payload)
            response.raise_for_status()
            return response.json()

    async def _post_async(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self.async_transport
        ) as client:
            response = await client.post(f"{self.base_url}{path}", json=payload)
            response.raise_for_status()
            return response.json()

    # ============ SYNC METHODS (for scripts, blocking contexts) ============

    def generate_response(
        self,
        user_id: str,
        task_id: int,
        prompt: str,
        conversation_history: Optional[Sequence[Dict[str, str]]] = None,
        task_name: Optional[str] = None,
        task_description: Optional[str] = None,
    ) -> PromptResult:
        """Submit a prompt and get the model response (synchronous).

        Args:
            user_id: Participant id
            task_id: Task id
            prompt: New prompt text
            conversation_history: Prior messages as {"role", "text"} dicts
            task_name: Optional task name for the model context
            task_description: Optional task description for the model context

        Returns:
            PromptResult with response text and assigned turn number

        Raises:
            httpx.HTTPStatusError: On 4xx/5xx responses
        """
        data = self._post(
            "/api/generate-response",
            _generate_payload(
                user_id, task_id, prompt, conversation_history, task_name, task_description
            ),
        )
        return PromptResult(response=data["response"], turn_number=data["turnNumber"])

    def get_prompts(self, user_id: str, task_id: int) -> List[Dict[str, Any]]:
        """Stored turns for (user, task), ordered by turn number (synchronous)."""
        data = self._post("/api/get-prompts", {"userID": user_id, "taskId": task_id})
        return data["data"]

    def get_completed_tasks(self, user_id: str) -> List[int]:
        """Completed task ids for a participant (synchronous)."""
        data = self._post("/api/get-completed-tasks", {"userID": user_id})
        return data["data"]

    def get_task(self, task_id: int) -> Dict[str, Any]:
        """Task details including descriptionHtml (synchronous)."""
        data = self._post("/api/get-task", {"taskId": task_id})
        return data["data"]

    def task_access(self, user_id: str, task_id: int) -> Dict[str, Any]:
        """Gating decision for a task (synchronous)."""
        data = self._post("/api/task-access", {"userID": user_id, "taskId": task_id})
        return data["data"]

    def advance_task(self, user_id: str, task_id: int) -> Dict[str, Any]:
        """Move forward from a task; returns the next sequencer state (synchronous)."""
        data = self._post("/api/advance-task", {"userID": user_id, "taskId": task_id})
        return data["data"]

    def create_user(self, user_id: str) -> Dict[str, Any]:
        """Register a participant id (synchronous).

        Returns:
            {"success": bool, "error": optional message}
        """
        return self._post("/api/create-user", {"id": user_id})

    def close(self):
        """Close the HTTP client (no-op, clients are auto-closed)."""
        pass

    # ============ ASYNC METHODS (for agents, async frameworks) ============

    async def generate_response_async(
        self,
        user_id: str,
        task_id: int,
        prompt: str,
        conversation_history: Optional[Sequence[Dict[str, str]]] = None,
        task_name: Optional[str] = None,
        task_description: Optional[str] = None,
    ) -> PromptResult:
        """Submit a prompt and get the model response (asynchronous)."""
        data = await self._post_async(
            "/api/generate-response",
            _generate_payload(
                user_id, task_id, prompt, conversation_history, task_name, task_description
            ),
        )
        return PromptResult(response=data["response"], turn_number=data["turnNumber"])

    async def get_prompts_async(self, user_id: str, task_id: int) -> List[Dict[str, Any]]:
        data = await self._post_async(
            "/api/get-prompts", {"userID": user_id, "taskId": task_id}
        )
        return data["data"]

    async def get_completed_tasks_async(self, user_id: str) -> List[int]:
        data = await self._post_async("/api/get-completed-tasks", {"userID": user_id})
        return data["data"]

    async def get_task_async(self, task_id: int) -> Dict[str, Any]:
        data = await self._post_async("/api/get-task", {"taskId": task_id})
        return data["data"]

    async def task_access_async(self, user_id: str, task_id: int) -> Dict[str, Any]:
        data = await self._post_async(
            "/api/task-access", {"userID": user_id, "taskId": task_id}
        )
        return data["data"]

    async def advance_task_async(self, user_id: str, task_id: int) -> Dict[str, Any]:
        data = await self._post_async(
            "/api/advance-task", {"userID": user_id, "taskId": task_id}
        )
        return data["data"]

    async def create_user_async(self, user_id: str) -> Dict[str, Any]:
        return await self._post_async("/api/create-user", {"id": user_id})

    async def close_async(self):
        """Close the HTTP client (no-op, clients are auto-closed)."""
        pass
