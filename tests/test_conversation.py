"""Tests for the /converse state machine."""

from __future__ import annotations

import pytest
from conftest import json_response

from witai.core.config import AppSettings
from witai.core.domain.models import Context, Converse, ConverseType
from witai.core.errors import ConversationLimitError, WitResponseError
from witai.core.services.client import WitClient

MSG = {"type": "msg", "msg": "Which city?", "confidence": 0.9}
ACTION = {"type": "action", "action": "fetch-weather", "confidence": 0.8}
STOP = {"type": "stop", "confidence": 1.0}


class TestSingleTurn:
    def test_first_sends_query(self, scripted_client) -> None:
        client, transport = scripted_client(json_response(MSG))
        turn = client.converse_first("session-1", "weather please")

        sent = transport.last
        assert sent.method == "POST"
        assert sent.path == "/converse"
        assert sent.query == {"q": "weather please", "session_id": "session-1"}
        assert sent.content == b"{}"
        assert turn.type is ConverseType.MSG
        assert turn.message == "Which city?"

    def test_next_omits_query(self, scripted_client) -> None:
        client, transport = scripted_client(json_response(STOP))
        turn = client.converse_next("session-1")
        assert transport.last.query == {"session_id": "session-1"}
        assert turn.is_stop

    def test_context_is_the_body(self, scripted_client) -> None:
        client, transport = scripted_client(json_response(STOP))
        client.converse_next("session-1", context=Context(state="ask-city", timezone="UTC"))
        assert transport.last.json() == {"state": "ask-city", "timezone": "UTC"}


class TestConverseUntilStop:
    def test_msg_then_stop(self, scripted_client) -> None:
        client, transport = scripted_client(json_response(MSG), json_response(STOP))
        turns = client.converse_until_stop("session-1", "weather please")

        assert len(turns) == 2
        assert turns[-1].is_stop
        assert [t.type for t in turns] == [ConverseType.MSG, ConverseType.STOP]
        assert "q" in transport.requests[0].query
        assert "q" not in transport.requests[1].query

    def test_immediate_stop(self, scripted_client) -> None:
        client, _ = scripted_client(json_response(STOP))
        assert len(client.converse_until_stop("session-1", "bye")) == 1

    def test_action_hook_updates_context(self, scripted_client) -> None:
        client, transport = scripted_client(json_response(ACTION), json_response(STOP))
        seen: list[Converse] = []

        def on_action(turn: Converse, context):
            seen.append(turn)
            return {"state": "done", "timezone": "UTC"}

        turns = client.converse_until_stop("session-1", "weather in Paris", on_action=on_action)

        assert len(turns) == 2
        assert [t.action for t in seen] == ["fetch-weather"]
        assert transport.requests[1].json() == {"state": "done", "timezone": "UTC"}

    def test_hook_returning_none_keeps_context(self, scripted_client) -> None:
        client, transport = scripted_client(json_response(ACTION), json_response(STOP))
        client.converse_until_stop(
            "session-1",
            "hi",
            context={"state": "start"},
            on_action=lambda turn, context: None,
        )
        assert transport.requests[1].json() == {"state": "start"}

    def test_hook_not_called_for_msg_turns(self, scripted_client) -> None:
        client, _ = scripted_client(json_response(MSG), json_response(STOP))
        calls: list[Converse] = []
        client.converse_until_stop("session-1", "hi", on_action=lambda turn, ctx: calls.append(turn))
        assert calls == []

    def test_max_steps_guard(self, scripted_client) -> None:
        client, transport = scripted_client(*(json_response(MSG) for _ in range(5)))
        with pytest.raises(ConversationLimitError) as info:
            client.converse_until_stop("session-1", "loop", max_steps=2)
        assert len(info.value.turns) == 2
        assert len(transport.requests) == 2
        assert str(info.value) == "converse limit error: no stop turn after 2 steps"

    def test_default_limit_from_settings(self, settings: AppSettings) -> None:
        from conftest import ScriptedTransport

        limited = settings.model_copy(update={"converse_max_steps": 3})
        transport = ScriptedTransport(responses=[json_response(MSG) for _ in range(5)])
        client = WitClient(settings=limited, transport=transport)
        with pytest.raises(ConversationLimitError):
            client.converse_until_stop("session-1", "loop")
        assert len(transport.requests) == 3

    def test_invalid_limit(self, scripted_client) -> None:
        client, _ = scripted_client()
        with pytest.raises(ValueError):
            client.converse_until_stop("session-1", "hi", max_steps=0)

    def test_remote_error_mid_loop(self, scripted_client) -> None:
        client, _ = scripted_client(
            json_response(MSG),
            json_response({"error": "Session expired", "code": "unknown"}, status_code=400),
        )
        with pytest.raises(WitResponseError) as info:
            client.converse_until_stop("session-1", "hi")
        assert str(info.value) == "converse response error: Session expired"
