from datetime import timedelta

import structlog
from django.core.management.base import BaseCommand

from clinic.exceptions import ConfigurationError
from clinic.models import DoctorProfile
from clinic.services.clock import facility_today
from clinic.services.slots import available_slots
from clinic.services.updates import broadcast_slots_changed, cached_slot_payload

logger = structlog.get_logger(__name__)


class Command(BaseCommand):
    help = "Rebuild cached slot lists for the coming days; broadcast a refresh to open booking screens."

    def add_arguments(self, parser):
        parser.add_argument('--days', type=int, default=7, help='number of days to warm, starting today')
        parser.add_argument('--doctor', type=int, help='only this doctor id')

    def handle(self, *args, **options):
        today = facility_today()
        days = [today + timedelta(days=i) for i in range(max(options['days'], 0))]
        doctors = DoctorProfile.objects.order_by('id')
        if options.get('doctor'):
            doctors = doctors.filter(id=options['doctor'])

        warmed = 0
        for doctor in doctors:
            # bumps the doctor's cache version and notifies subscribers
            broadcast_slots_changed(doctor.id, cause='refresh')
            for day in days:
                try:
                    cached_slot_payload(doctor.id, day, lambda: available_slots(doctor.id, day).as_dict())
                except ConfigurationError as exc:
                    logger.warning('slot_refresh_skipped', doctor_id=doctor.id, error=exc.message)
                    self.stderr.write(f"skipped doctor {doctor.id}: {exc.message}")
                    break
                warmed += 1

        self.stdout.write(self.style.SUCCESS(f"Warmed {warmed} slot lists from {today.isoformat()}"))
