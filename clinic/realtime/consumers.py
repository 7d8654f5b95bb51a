import json
from datetime import date

from channels.generic.websocket import AsyncWebsocketConsumer
from django.contrib.auth.models import AnonymousUser

from clinic.services.clock import parse_day
from clinic.services.updates import slot_group


class SlotUpdatesConsumer(AsyncWebsocketConsumer):
    """Pushes ``slots.changed`` events for one doctor and date.

    The socket joins both the (doctor, date) group and the doctor-wide
    group, since weekly schedule edits are announced without a date.
    Clients refetch ``/api/slots`` on every event; nothing else is sent.
    """

    async def connect(self):
        user = self.scope.get("user") or AnonymousUser()
        if not user.is_authenticated:
            await self.close(code=4003)
            return

        kwargs = self.scope["url_route"]["kwargs"]
        try:
            self.doctor_id = int(kwargs["doctor_id"])
            self.day: date = parse_day(kwargs["day"])
        except (KeyError, ValueError):
            await self.close(code=4001)
            return

        self.groups_joined = [slot_group(self.doctor_id, self.day), slot_group(self.doctor_id)]
        for group in self.groups_joined:
            await self.channel_layer.group_add(group, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        for group in getattr(self, "groups_joined", []):
            await self.channel_layer.group_discard(group, self.channel_name)

    async def slots_changed(self, event):
        # event: {"type": "slots.changed", "doctorId": int, "date": "YYYY-MM-DD"|None, "cause": str, "ts": "..."}
        await self.send(json.dumps(event))
