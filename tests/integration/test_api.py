"""Integration tests for API endpoints."""

import pytest
from httpx import AsyncClient, ASGITransport

from src.api.dependencies import get_conversation_service, get_shared_llm_client
from src.core.exceptions import LLMError, LLMTimeoutError
from src.persistence.repositories.turn_repo import TurnRepository
from src.services.conversation_service import ConversationService


@pytest.fixture
def app_with_test_db(seeded_db):
    """App bound to a seeded temporary database."""
    from src.main import app

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def use_llm(app_with_test_db, seeded_db):
    """Route prompt submissions to the given fake LLM client."""

    def _use(llm):
        app_with_test_db.dependency_overrides[get_conversation_service] = (
            lambda: ConversationService(
                TurnRepository(str(seeded_db)), client_factory=lambda: llm
            )
        )
        return llm

    return _use


@pytest.fixture
async def client(app_with_test_db):
    transport = ASGITransport(app=app_with_test_db)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ============ SYSTEM ============


@pytest.mark.asyncio
async def test_root_endpoint(client):
    """Root endpoint returns basic info."""
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Prompt Study Service"
    assert data["status"] == "running"
    assert "X-Request-ID" in response.headers


@pytest.mark.asyncio
async def test_health_endpoint(client, monkeypatch):
    from src.core import config

    monkeypatch.setattr(config.settings, "llm_provider", "gemini")
    monkeypatch.setattr(config.settings, "gemini_api_key", "k")
    monkeypatch.setattr(config.settings, "llm_model", None)

    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["components"]["database"]["task_count"] == 7
    assert data["components"]["task_catalog"]["status"] == "healthy"
    assert data["components"]["llm"] == {
        "status": "configured",
        "provider": "gemini",
        "model": "gemini-2.0-flash",
    }


@pytest.mark.asyncio
async def test_health_degraded_without_api_key(client, monkeypatch):
    from src.core import config

    monkeypatch.setattr(config.settings, "llm_provider", "gemini")
    monkeypatch.setattr(config.settings, "gemini_api_key", None)

    response = await client.get("/health")

    data = response.json()
    assert data["status"] == "degraded"
    assert data["components"]["llm"]["status"] == "missing_api_key"


@pytest.mark.asyncio
async def test_liveness_and_readiness(client):
    live = await client.get("/health/live")
    ready = await client.get("/health/ready")

    assert live.json() == {"status": "alive"}
    assert ready.status_code == 200
    assert ready.json() == {"status": "ready"}


@pytest.mark.asyncio
async def test_readiness_requires_seeded_catalog(test_db):
    from src.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        response = await c.get("/health/ready")

    assert response.status_code == 503
    assert response.json() == {"status": "not_ready", "error": "Task catalog not seeded"}


# ============ GENERATE RESPONSE ============


@pytest.mark.asyncio
async def test_generate_response_what_is_two_plus_two(client, use_llm, make_fake_llm):
    """First prompt for (u1, 3) returns turnNumber 1 and is replayable."""
    llm = use_llm(make_fake_llm(responses=["4"]))

    response = await client.post(
        "/api/generate-response",
        json={
            "userID": "u1",
            "taskID": 3,
            "prompt": "What is 2+2?",
            "taskName": "Task 3",
            "taskDescription": "Arithmetic",
            "conversationHistory": [],
        },
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "response": "4", "turnNumber": 1}
    assert llm.call_count == 1

    prompts = await client.post("/api/get-prompts", json={"userID": "u1", "taskId": 3})
    data = prompts.json()["data"]
    assert len(data) == 1
    assert data[0]["turn_number"] == 1
    assert data[0]["prompt_text"] == "What is 2+2?"
    assert data[0]["response_text"] == "4"


@pytest.mark.asyncio
async def test_generate_response_sends_history(client, use_llm, fake_llm):
    use_llm(fake_llm)

    await client.post(
        "/api/generate-response",
        json={
            "userID": "u1",
            "taskID": 1,
            "prompt": "and now?",
            "conversationHistory": [
                {"role": "user", "text": "hi"},
                {"role": "assistant", "text": "hello"},
            ],
        },
    )

    transcript = fake_llm.transcripts[0]
    assert [b.text for b in transcript.history] == ["hi", "hello"]
    assert transcript.blocks[-1].text == "and now?"


@pytest.mark.asyncio
async def test_generate_response_missing_prompt(client, use_llm, fake_llm):
    """Missing prompt is a 400 and the model is never called."""
    use_llm(fake_llm)

    response = await client.post(
        "/api/generate-response",
        json={"userID": "u1", "taskID": 1, "conversationHistory": []},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: prompt"}
    assert fake_llm.call_count == 0

    prompts = await client.post("/api/get-prompts", json={"userID": "u1", "taskId": 1})
    assert prompts.json()["data"] == []


@pytest.mark.asyncio
async def test_generate_response_bad_field_type(client, use_llm, fake_llm):
    use_llm(fake_llm)

    response = await client.post(
        "/api/generate-response",
        json={"userID": "u1", "taskID": "three", "prompt": "hi"},
    )

    assert response.status_code == 400
    assert "taskID" in response.json()["error"]


@pytest.mark.asyncio
async def test_generate_response_missing_api_key(client, monkeypatch):
    """Missing provider key is a descriptive 500."""
    from src.core import config

    monkeypatch.setattr(config.settings, "llm_provider", "gemini")
    monkeypatch.setattr(config.settings, "gemini_api_key", None)
    get_shared_llm_client.cache_clear()

    response = await client.post(
        "/api/generate-response",
        json={"userID": "u1", "taskID": 1, "prompt": "hi"},
    )

    assert response.status_code == 500
    assert "Gemini API key not configured" in response.json()["error"]


@pytest.mark.asyncio
async def test_generate_response_model_failure(client, use_llm, make_fake_llm):
    use_llm(make_fake_llm(error=LLMError("Failed to get response from Gemini API")))

    response = await client.post(
        "/api/generate-response",
        json={"userID": "u1", "taskID": 1, "prompt": "hi"},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to get response from Gemini API"}


@pytest.mark.asyncio
async def test_generate_response_model_timeout(client, use_llm, make_fake_llm):
    use_llm(make_fake_llm(error=LLMTimeoutError("LLM call timed out (timeout=60.0s)")))

    response = await client.post(
        "/api/generate-response",
        json={"userID": "u1", "taskID": 1, "prompt": "hi"},
    )

    assert response.status_code == 504


# ============ TASKS / PROGRESS ============


@pytest.mark.asyncio
async def test_get_task(client):
    response = await client.post("/api/get-task", json={"taskId": 2})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == 2
    assert data["name"] == "Task 2"
    assert data["descriptionHtml"] == "Do thing 2.<br /><strong>Goal:</strong> finish 2"


@pytest.mark.asyncio
async def test_get_task_not_found(client):
    response = await client.post("/api/get-task", json={"taskId": 99})

    assert response.status_code == 404
    assert response.json() == {"error": "Task 99 not found"}


@pytest.mark.asyncio
async def test_get_completed_tasks(client, use_llm, fake_llm):
    use_llm(fake_llm)
    for task_id in (2, 1, 2):
        await client.post(
            "/api/generate-response",
            json={"userID": "u1", "taskID": task_id, "prompt": "hi"},
        )

    response = await client.post("/api/get-completed-tasks", json={"userID": "u1"})

    assert response.json() == {"data": [1, 2]}


@pytest.mark.asyncio
async def test_get_completed_tasks_missing_user(client):
    response = await client.post("/api/get-completed-tasks", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: userID"}


@pytest.mark.asyncio
async def test_task_access_and_advance(client, use_llm, fake_llm):
    use_llm(fake_llm)

    locked = await client.post("/api/task-access", json={"userID": "u1", "taskId": 2})
    assert locked.json()["data"]["accessible"] is False
    assert locked.json()["data"]["requiredTaskId"] == 1

    blocked = await client.post("/api/advance-task", json={"userID": "u1", "taskId": 1})
    assert blocked.status_code == 403

    await client.post(
        "/api/generate-response",
        json={"userID": "u1", "taskID": 1, "prompt": "hi"},
    )

    opened = await client.post("/api/task-access", json={"userID": "u1", "taskId": 2})
    data = opened.json()["data"]
    assert data["accessible"] is True
    assert data["next"] == {"kind": "task", "taskId": 3}
    assert data["totalTasks"] == 7

    advanced = await client.post("/api/advance-task", json={"userID": "u1", "taskId": 1})
    assert advanced.json() == {"data": {"kind": "task", "taskId": 2}}


@pytest.mark.asyncio
async def test_task_access_last_task_leads_to_complete(client):
    response = await client.post("/api/task-access", json={"userID": "u1", "taskId": 7})

    assert response.json()["data"]["next"] == {"kind": "complete", "taskId": None}


# ============ PARTICIPANTS ============


@pytest.mark.asyncio
async def test_create_user(client):
    first = await client.post("/api/create-user", json={"id": "user-abc"})
    duplicate = await client.post("/api/create-user", json={"id": "user-abc"})

    assert first.json() == {"success": True}
    assert duplicate.status_code == 200
    assert duplicate.json()["success"] is False
    assert "already exists" in duplicate.json()["error"]


@pytest.mark.asyncio
async def test_create_user_missing_id(client):
    response = await client.post("/api/create-user", json={})

    assert response.json()["success"] is False
