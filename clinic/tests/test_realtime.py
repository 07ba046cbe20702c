import json

import pytest
from asgiref.sync import async_to_sync, sync_to_async
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.urls import path

from clinic.realtime.broadcast import broadcast_schedule_change
from clinic.realtime.consumers import ScheduleConsumer

application = URLRouter([path("ws/schedule/<int:doctor_id>/", ScheduleConsumer.as_asgi())])


@pytest.mark.django_db(transaction=True)
def test_subscriber_receives_schedule_changes():
    async def scenario():
        communicator = WebsocketCommunicator(application, "/ws/schedule/5/")
        connected, _ = await communicator.connect()
        assert connected

        await sync_to_async(broadcast_schedule_change)(5, slot_id=42, action="booked")
        message = json.loads(await communicator.receive_from(timeout=2))
        assert message["type"] == "schedule.changed"
        assert message["doctorId"] == 5
        assert message["slotId"] == 42
        assert message["action"] == "booked"

        # other doctors' changes are not delivered
        await sync_to_async(broadcast_schedule_change)(6, slot_id=1, action="created")
        assert await communicator.receive_nothing(timeout=0.2)

        await communicator.send_to(text_data="ping")
        assert await communicator.receive_from(timeout=2) == "pong"
        await communicator.disconnect()

    async_to_sync(scenario)()
