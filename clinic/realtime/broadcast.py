import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

logger = logging.getLogger(__name__)


def schedule_group(doctor_id: int) -> str:
    return f"schedule.{doctor_id}"


def broadcast_schedule_change(doctor_id: int, *, slot_id=None, action: str) -> None:
    """Tell subscribers of a doctor's calendar to refetch; never raises."""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    event = {
        'type': 'schedule.changed',
        'doctorId': doctor_id,
        'slotId': slot_id,
        'action': action,
        'ts': timezone.now().isoformat(),
    }
    try:
        async_to_sync(channel_layer.group_send)(schedule_group(doctor_id), event)
    except Exception:
        logger.exception('schedule broadcast failed for doctor %s', doctor_id)
