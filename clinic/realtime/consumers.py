import json

from channels.generic.websocket import AsyncWebsocketConsumer

from clinic.realtime.broadcast import schedule_group


class ScheduleConsumer(AsyncWebsocketConsumer):
    """Read-only feed of slot and booking changes for one doctor.

    Availability is public, so anonymous sockets may subscribe too.
    """

    async def connect(self):
        try:
            self.doctor_id = int(self.scope["url_route"]["kwargs"].get("doctor_id"))
        except (TypeError, ValueError):
            await self.close(code=4001)
            return

        self.group_name = schedule_group(self.doctor_id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        # keepalive only
        if text_data and text_data.strip() == "ping":
            await self.send(text_data="pong")

    async def schedule_changed(self, event):
        await self.send(text_data=json.dumps({
            "type": "schedule.changed",
            "doctorId": event.get("doctorId"),
            "slotId": event.get("slotId"),
            "action": event.get("action"),
            "ts": event.get("ts"),
        }))
