from datetime import date
from unittest import mock

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser

from clinic.realtime.routing import websocket_urlpatterns
from clinic.services.updates import slot_group

pytestmark = pytest.mark.django_db


def _communicator(user, doctor_id=7, day='2024-06-10'):
    comm = WebsocketCommunicator(URLRouter(websocket_urlpatterns), f"/ws/slots/{doctor_id}/{day}/")
    comm.scope["user"] = user
    return comm


def test_subscriber_receives_date_and_doctor_wide_events():
    user = mock.Mock(is_authenticated=True)

    async def run():
        comm = _communicator(user)
        connected, _ = await comm.connect()
        assert connected
        layer = get_channel_layer()
        await layer.group_send(slot_group(7, date(2024, 6, 10)), {
            "type": "slots.changed", "doctorId": 7, "date": "2024-06-10", "cause": "booking", "ts": "t",
        })
        first = await comm.receive_json_from()
        await layer.group_send(slot_group(7), {
            "type": "slots.changed", "doctorId": 7, "date": None, "cause": "weekly_schedule", "ts": "t",
        })
        second = await comm.receive_json_from()
        await comm.disconnect()
        return first, second

    first, second = async_to_sync(run)()
    assert first["cause"] == "booking"
    assert first["date"] == "2024-06-10"
    assert second["cause"] == "weekly_schedule"


def test_anonymous_socket_is_closed():
    async def run():
        comm = _communicator(AnonymousUser())
        connected, code = await comm.connect()
        return connected, code

    connected, code = async_to_sync(run)()
    assert not connected
    assert code == 4003


def test_bad_date_is_closed():
    async def run():
        comm = _communicator(mock.Mock(is_authenticated=True), day='tomorrow')
        return await comm.connect()

    connected, code = async_to_sync(run)()
    assert not connected
    assert code == 4001
