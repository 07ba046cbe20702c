from django.conf import settings
from django.core.cache import cache
from django.core.management.base import BaseCommand
from django.utils import timezone

from clinic.models import User
from clinic.realtime.broadcast import broadcast_schedule_change
from clinic.services.doctors import doctors_cache_key, list_doctors


class Command(BaseCommand):
    help = "Warm the doctor directory cache; tell schedule subscribers to refetch."

    def handle(self, *args, **options):
        now = timezone.now()
        data, total = list_doctors()
        key = doctors_cache_key(None, None, None)
        cache.set(key, {
            'ok': True,
            'data': data,
            'pagination': {'total': total, 'page': 1, 'pageSize': total},
        }, settings.DOCTORS_CACHE_SECONDS)

        doctor_ids = list(User.objects.filter(role=User.ROLE_DOCTOR).values_list('id', flat=True))
        for doctor_id in doctor_ids:
            broadcast_schedule_change(doctor_id, action='refresh')

        self.stdout.write(self.style.SUCCESS(
            f"Refreshed {key} ({total} doctors), notified {len(doctor_ids)} calendars at {now}"
        ))
