import json

import pytest

from eventcounter.message import EventType, Message


@pytest.mark.parametrize(
    "value, member",
    [
        ("created", EventType.CREATED),
        ("updated", EventType.UPDATED),
        ("deleted", EventType.DELETED),
    ],
)
def test_event_type_values(value, member):
    assert EventType(value) is member
    msg = Message(uid="abc", event_type=EventType(value), user_id="user_a")
    assert msg.to_dict()["event_type"] == value


def test_event_type_from_string():
    assert EventType("deleted") is EventType.DELETED


def test_event_type_unknown_raises():
    with pytest.raises(ValueError):
        EventType("archived")


def test_str_is_value():
    assert str(EventType("updated")) == "updated"


def test_to_dict_field_names():
    msg = Message(uid="abc", event_type=EventType.CREATED, user_id="user_a")
    assert msg.to_dict() == {"uid": "abc", "event_type": "created", "user_id": "user_a"}


def test_to_dict_is_json_serialisable_round_trip():
    msg = Message(uid="x1", event_type=EventType.DELETED, user_id="user_e")
    data = json.loads(json.dumps(msg.to_dict()))
    restored = Message(data["uid"], EventType(data["event_type"]), data["user_id"])
    assert restored == msg