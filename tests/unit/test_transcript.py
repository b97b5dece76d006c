"""Tests for transcript and conversation models."""

from datetime import datetime, timezone

from src.domain.models.transcript import (
    HistoryBlock,
    PromptBlock,
    SystemBlock,
    TaskContextBlock,
    Transcript,
    TranscriptRole,
)
from src.domain.models.turn import Message, Turn, conversation_from_turns


def test_build_fixed_order():
    """System, task context, history, prompt."""
    transcript = Transcript.build(
        system=SystemBlock(text="sys"),
        task_context=TaskContextBlock(task_id=1, text="ctx"),
        history=[Message(role="user", text="a"), Message(role="assistant", text="b")],
        prompt="c",
    )

    kinds = [b.kind for b in transcript.blocks]
    assert kinds == ["system", "task_context", "history", "history", "prompt"]
    assert transcript.prompt == "c"
    assert len(transcript) == 5


def test_build_without_task_context():
    transcript = Transcript.build(system=SystemBlock(text="sys"), history=[], prompt="p")

    assert [b.kind for b in transcript.blocks] == ["system", "prompt"]


def test_non_user_roles_map_to_model():
    """Only "user" stays user; any other role becomes the model role."""
    transcript = Transcript.build(
        system=SystemBlock(text="sys"),
        history=[
            Message(role="user", text="1"),
            Message(role="assistant", text="2"),
            Message(role="system", text="3"),
        ],
        prompt="p",
    )

    assert [b.role for b in transcript.history] == [
        TranscriptRole.USER,
        TranscriptRole.MODEL,
        TranscriptRole.MODEL,
    ]


def test_history_is_never_truncated():
    history = [
        Message(role="user" if i % 2 == 0 else "assistant", text=f"m{i}")
        for i in range(200)
    ]

    transcript = Transcript.build(system=SystemBlock(text="s"), history=history, prompt="p")

    assert [b.text for b in transcript.history] == [m.text for m in history]


def test_entries_flatten_in_send_order():
    transcript = Transcript(
        blocks=[
            SystemBlock(text="s"),
            HistoryBlock(role=TranscriptRole.MODEL, text="h"),
            PromptBlock(text="p"),
        ]
    )

    assert transcript.entries() == [
        (TranscriptRole.USER, "s"),
        (TranscriptRole.MODEL, "h"),
        (TranscriptRole.USER, "p"),
    ]


def test_conversation_from_turns_two_messages_per_turn():
    """Turns expand to user then assistant messages in turn order."""
    now = datetime.now(timezone.utc)
    turns = [
        Turn(user_id="u1", task_id=1, turn_number=2, prompt_text="p2",
             response_text="r2", created_at=now),
        Turn(user_id="u1", task_id=1, turn_number=1, prompt_text="p1",
             response_text="r1", created_at=now),
    ]

    messages = conversation_from_turns(turns)

    assert [(m.role, m.text) for m in messages] == [
        ("user", "p1"),
        ("assistant", "r1"),
        ("user", "p2"),
        ("assistant", "r2"),
    ]
