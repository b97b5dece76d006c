# tests/ui/test_api_client.py
"""Tests for the study API client."""

import json

import httpx
import pytest

from ui.api_client import APIClient, PromptResult


def _handler(requests):
    def handle(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        requests.append((request.url.path, body))
        if request.url.path == "/api/generate-response":
            return httpx.Response(
                200, json={"success": True, "response": "4", "turnNumber": 1}
            )
        if request.url.path == "/api/create-user":
            return httpx.Response(200, json={"success": True})
        if request.url.path == "/api/get-task":
            return httpx.Response(404, json={"error": "Task 99 not found"})
        return httpx.Response(200, json={"data": []})

    return handle


class TestAPIClient:
    """Tests for APIClient."""

    def test_generate_response_payload(self):
        requests = []
        client = APIClient(
            base_url="http://study.test/",
            transport=httpx.MockTransport(_handler(requests)),
        )

        result = client.generate_response(
            "u1",
            3,
            "What is 2+2?",
            conversation_history=[{"role": "user", "text": "hi", "timestamp": "x"}],
            task_name="Arithmetic",
        )

        assert result == PromptResult(response="4", turn_number=1)
        path, body = requests[0]
        assert path == "/api/generate-response"
        assert body == {
            "userID": "u1",
            "taskID": 3,
            "prompt": "What is 2+2?",
            "conversationHistory": [{"role": "user", "text": "hi"}],
            "taskName": "Arithmetic",
        }

    def test_error_status_raises(self):
        client = APIClient(transport=httpx.MockTransport(_handler([])))

        with pytest.raises(httpx.HTTPStatusError):
            client.get_task(99)

    def test_create_user(self):
        requests = []
        client = APIClient(transport=httpx.MockTransport(_handler(requests)))

        assert client.create_user("abc") == {"success": True}
        assert requests == [("/api/create-user", {"id": "abc"})]

    @pytest.mark.asyncio
    async def test_async_methods(self):
        requests = []
        client = APIClient(async_transport=httpx.MockTransport(_handler(requests)))

        result = await client.generate_response_async("u1", 1, "hi")
        prompts = await client.get_prompts_async("u1", 1)

        assert result.turn_number == 1
        assert prompts == []
        assert requests[1] == ("/api/get-prompts", {"userID": "u1", "taskId": 1})
