"""Unit tests for the Subscriber — managed flag, decoding, stats."""

from __future__ import annotations

import pytest

from modelsync.core.dispatcher import Dispatcher
from modelsync.core.subscriber import Subscriber, is_managed
from modelsync.errors import CodecError, EnvelopeValidationError
from modelsync.models.envelopes import MANAGED_FLAG

_MANAGED = {"class": "SubscriberUser", "action": "create", "id": 1, MANAGED_FLAG: True}


@pytest.fixture
def subscriber(dispatcher: Dispatcher, registry, user_type) -> Subscriber:
    registry.register_subscribe(user_type, ["name"])
    return Subscriber(dispatcher)


class TestIsManaged:
    @pytest.mark.parametrize("flag", [True, "true", "True", "1", " true "])
    def test_managed_values(self, flag):
        assert is_managed({MANAGED_FLAG: flag})

    @pytest.mark.parametrize("flag", [None, False, "false", "0", "", 1])
    def test_unmanaged_values(self, flag):
        assert not is_managed({MANAGED_FLAG: flag})

    def test_missing_flag(self):
        assert not is_managed({"class": "User"})


class TestOnMessage:
    def test_processes_managed_message(self, subscriber, store, user_type):
        report = subscriber.on_message(b'{"name":"Ada"}', _MANAGED)
        assert report is not None
        assert report.ok
        assert store.find(user_type, "id", 1)["name"] == "Ada"
        assert subscriber.stats["processed"] == 1

    def test_ignores_unmanaged_message(self, subscriber, store, user_type):
        attributes = {k: v for k, v in _MANAGED.items() if k != MANAGED_FLAG}
        assert subscriber.on_message(b'{"name":"Ada"}', attributes) is None
        assert store.count(user_type) == 0
        assert subscriber.stats == {
            "received": 1,
            "ignored": 1,
            "processed": 0,
            "handler_failures": 0,
        }

    def test_string_flag_accepted(self, subscriber):
        attributes = {**_MANAGED, MANAGED_FLAG: "true"}
        assert subscriber.on_message(b'{"name":"Ada"}', attributes) is not None

    def test_invalid_json_raises(self, subscriber):
        with pytest.raises(CodecError):
            subscriber.on_message(b"{nope", _MANAGED)
        assert subscriber.stats["processed"] == 0

    def test_non_object_payload_raises(self, subscriber):
        with pytest.raises(EnvelopeValidationError, match="JSON object"):
            subscriber.on_message(b"[1, 2]", _MANAGED)

    def test_missing_class_raises(self, subscriber):
        attributes = {k: v for k, v in _MANAGED.items() if k != "class"}
        with pytest.raises(EnvelopeValidationError):
            subscriber.on_message(b'{"name":"Ada"}', attributes)

    def test_handler_failures_counted(self, subscriber):
        attributes = {**_MANAGED, "id": None}
        report = subscriber.on_message(b'{"name":"Ada"}', attributes)
        assert not report.ok
        assert subscriber.stats["handler_failures"] == 1

    def test_start_registers_callback(self, subscriber, transport):
        subscriber.start(transport)
        assert transport.handler == subscriber.on_message
