"""Tests for witai.core.domain.models (presence, aliases, accessors)."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from witai.core.domain.models import (
    Context,
    Converse,
    ConverseType,
    Entity,
    EntityValue,
    Intent,
    IntentExpression,
    Location,
    Message,
    Outcome,
    expressions_of,
)
from witai.core.request_builder import build_body


class TestPresence:
    def test_unset_field_is_absent(self) -> None:
        intent = Intent(name="greet")
        assert intent.is_present("name")
        assert not intent.is_present("doc")
        assert intent.to_wire() == {"name": "greet"}

    def test_empty_string_is_present(self) -> None:
        intent = Intent(name="greet", doc="")
        assert intent.is_present("doc")
        assert intent.to_wire() == {"name": "greet", "doc": ""}

    def test_explicit_none_is_not_sent(self) -> None:
        intent = Intent(name="greet", doc=None)
        assert intent.to_wire() == {"name": "greet"}
        assert intent.to_wire(include={"name", "doc", "metadata"}) == {"name": "greet"}

    def test_explicit_none_nested(self) -> None:
        context = Context(timezone=None, location=Location(latitude=1.0, longitude=2.0))
        assert context.to_wire() == {"location": {"latitude": 1.0, "longitude": 2.0}}

    def test_decoded_key_marks_presence_even_when_empty(self) -> None:
        intent = Intent.model_validate({"name": "greet", "doc": ""})
        assert intent.is_present("doc")
        assert intent.doc == ""

    def test_decoded_missing_key_stays_absent(self) -> None:
        intent = Intent.model_validate({"name": "greet"})
        assert not intent.is_present("doc")
        assert intent.doc is None

    def test_nested_wire_omits_unset_fields(self) -> None:
        context = Context(
            timezone="America/Los_Angeles",
            entities=[Entity(id="color", values=[EntityValue(value="red")])],
            location=Location(latitude=37.5, longitude=127.0),
        )
        assert context.to_wire() == {
            "timezone": "America/Los_Angeles",
            "entities": [{"id": "color", "values": [{"value": "red"}]}],
            "location": {"latitude": 37.5, "longitude": 127.0},
        }

    def test_models_are_frozen(self) -> None:
        intent = Intent(name="greet")
        with pytest.raises(ValidationError):
            intent.name = "other"


class TestMessage:
    def test_aliases(self) -> None:
        message = Message.model_validate(
            {
                "msg_id": "m-1",
                "_text": "how's the weather today?",
                "outcomes": [
                    {
                        "_text": "how's the weather today?",
                        "intent": "weather",
                        "entities": {"datetime": [{"value": "2016-04-01T00:00:00.000-07:00"}]},
                        "confidence": 0.92,
                    }
                ],
            }
        )
        assert message.message_id == "m-1"
        assert message.text == "how's the weather today?"
        assert len(message.outcomes) == 1
        assert message.outcomes[0].intent == "weather"
        assert message.to_wire()["msg_id"] == "m-1"

    def test_empty_outcomes_means_no_interpretation(self) -> None:
        message = Message.model_validate({"msg_id": "m-2", "_text": "???", "outcomes": []})
        assert message.outcomes == []
        assert message.best_outcome() is None

    def test_best_outcome(self) -> None:
        message = Message(
            outcomes=[
                Outcome(intent="a", confidence=0.2),
                Outcome(intent="b", confidence=0.7),
            ]
        )
        assert message.best_outcome().intent == "b"


class TestOutcome:
    def test_entity_values_in_order(self) -> None:
        outcome = Outcome(
            entities={"location": [{"value": "SF", "confidence": 0.8}, {"value": "NY"}]},
            confidence=0.5,
        )
        assert outcome.entity_values("location") == ["SF", "NY"]
        assert outcome.first_entity_value("location") == "SF"

    def test_missing_entity(self) -> None:
        outcome = Outcome()
        assert outcome.entity_values("location") == []
        assert outcome.first_entity_value("location", "unknown") == "unknown"

    def test_null_entities_become_empty(self) -> None:
        outcome = Outcome.model_validate({"intent": "x", "entities": None, "confidence": 0.1})
        assert outcome.entities == {}

    @pytest.mark.parametrize("confidence", [-0.1, 1.5])
    def test_confidence_out_of_range(self, confidence: float) -> None:
        with pytest.raises(ValidationError):
            Outcome(confidence=confidence)


class TestConverse:
    def test_types(self) -> None:
        turn = Converse.model_validate({"type": "msg", "msg": "Hello!", "confidence": 1.0})
        assert turn.type is ConverseType.MSG
        assert turn.message == "Hello!"
        assert not turn.is_stop
        assert Converse.model_validate({"type": "stop"}).is_stop

    def test_action_turn(self) -> None:
        turn = Converse.model_validate(
            {"type": "action", "action": "fetch-weather", "entities": {"loc": [{"value": "Paris"}]}}
        )
        assert turn.action == "fetch-weather"
        assert turn.entity_values("loc") == ["Paris"]

    def test_unknown_type_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Converse.model_validate({"type": "dance"})


class TestEntity:
    def test_flags_default_false(self) -> None:
        entity = Entity.model_validate({"id": "color"})
        assert (entity.closed, entity.exotic, entity.builtin) == (False, False, False)

    def test_round_trip(self) -> None:
        entity = Entity(values=[EntityValue(value="a", expressions=["x", "y"])])
        body = build_body(entity)
        assert Entity.model_validate_json(body) == entity


class TestIntentExpression:
    def test_helpers(self) -> None:
        assert IntentExpression.of("hello").to_wire() == {"body": "hello"}
        assert [e.body for e in expressions_of("a", "b")] == ["a", "b"]

    def test_created_echo(self) -> None:
        created = IntentExpression.model_validate({"intent_id": "greet", "body": "hello"})
        assert created.intent_id == "greet"
        assert not created.is_present("id")
