"""
Management command to populate the database with demo data.
"""
import random
from datetime import datetime, time, timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from clinic.models import Announcement, Appointment, DoctorSchedule, Prescription, Profile, User

DOCTORS = [
    ("Emily Carter", "Cardiology", "MD, FACC", 12, "150.00"),
    ("Rahul Mehta", "Dermatology", "MBBS, MD", 8, "90.00"),
    ("Laura Chen", "Pediatrics", "MD", 15, "110.00"),
    ("Omar Haddad", "Orthopedics", "MBBS, MS (Ortho)", 10, "130.00"),
]

PATIENTS = ["Alice Brown", "Ben Wilson", "Chloe Davis", "Daniel Garcia", "Eva Martinez"]

ANNOUNCEMENTS = [
    ("Stay hydrated this summer", "Drink at least eight glasses of water a day.", Announcement.CATEGORY_HEALTH_TIP),
    ("New pediatric wing", "Our pediatric wing opens next month with extended hours.", Announcement.CATEGORY_NEWS),
    ("Flu season alert", "Flu cases are rising. Book your vaccination today.", Announcement.CATEGORY_EMERGENCY),
    ("Holiday hours", "The clinic closes early on public holidays.", Announcement.CATEGORY_GENERAL),
]


def _email(name: str, role: str) -> str:
    return f"{name.lower().replace(' ', '.')}.{role}@example.com"


class Command(BaseCommand):
    help = 'Populate database with demo doctors, slots, announcements, appointments and prescriptions'

    def add_arguments(self, parser):
        parser.add_argument('--days', type=int, default=7, help='days of slots to create per doctor')
        parser.add_argument('--password', default='demo-pass-123')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Creating demo data...')
        password = options['password']

        doctors = self.create_doctors(password)
        patients = self.create_patients(password)
        slots = self.create_slots(doctors, options['days'])
        self.create_announcements(doctors)
        self.create_appointments(patients, slots)
        self.create_prescriptions(doctors, patients)

        self.stdout.write(self.style.SUCCESS('Demo data created.'))

    def _user(self, name, role, password):
        email = _email(name, role)
        user, created = User.objects.get_or_create(username=email, defaults={'email': email, 'role': role})
        if created:
            user.set_password(password)
            user.save()
        return user

    def create_doctors(self, password):
        doctors = []
        for name, specialty, quals, years, fee in DOCTORS:
            user = self._user(name, User.ROLE_DOCTOR, password)
            Profile.objects.update_or_create(user=user, defaults={
                'full_name': name,
                'specialization': specialty,
                'qualifications': quals,
                'experience_years': years,
                'consultation_fee': fee,
                'phone': f"+1555{random.randint(1000000, 9999999)}",
                'bio': f"{specialty} specialist with {years} years of experience.",
            })
            doctors.append(user)
        self.stdout.write(f'  doctors: {len(doctors)}')
        return doctors

    def create_patients(self, password):
        patients = []
        for i, name in enumerate(PATIENTS):
            user = self._user(name, User.ROLE_PATIENT, password)
            Profile.objects.update_or_create(user=user, defaults={
                'full_name': name,
                'phone': f"+1444{random.randint(1000000, 9999999)}",
                'date_of_birth': datetime(1970 + i * 7, 1 + i, 10).date(),
            })
            patients.append(user)
        self.stdout.write(f'  patients: {len(patients)}')
        return patients

    def create_slots(self, doctors, days):
        today = timezone.localdate()
        slots = []
        for doctor in doctors:
            for d in range(days):
                day = today + timedelta(days=d)
                for hour in (9, 10, 11, 14, 15):
                    slot, _ = DoctorSchedule.objects.get_or_create(
                        doctor=doctor, date=day, start_time=time(hour, 0),
                        defaults={'end_time': time(hour, 30)},
                    )
                    slots.append(slot)
        self.stdout.write(f'  slots: {len(slots)}')
        return slots

    def create_announcements(self, doctors):
        now = timezone.now()
        for i, (title, content, category) in enumerate(ANNOUNCEMENTS):
            Announcement.objects.get_or_create(title=title, defaults={
                'author': doctors[i % len(doctors)],
                'content': content,
                'category': category,
                'is_published': True,
                'published_at': now - timedelta(days=i),
            })

    def create_appointments(self, patients, slots):
        free = [s for s in slots if s.status == DoctorSchedule.STATUS_AVAILABLE]
        for patient, slot in zip(patients, random.sample(free, min(len(free), len(patients)))):
            start = timezone.make_aware(datetime.combine(slot.date, slot.start_time))
            Appointment.objects.create(
                patient=patient, doctor=slot.doctor, slot=slot, appointment_date=start,
                patient_notes='Routine check-up',
            )
            slot.status = DoctorSchedule.STATUS_BOOKED
            slot.save(update_fields=['status', 'updated_at'])

    def create_prescriptions(self, doctors, patients):
        for doctor, patient in zip(doctors, patients):
            name = patient.profile.full_name
            Prescription.objects.get_or_create(doctor=doctor, patient=patient, defaults={
                'patient_name': name,
                'patient_phone': patient.profile.phone,
                'diagnosis': 'Seasonal allergy',
                'medications': [{
                    'name': 'Cetirizine',
                    'dosage': '10mg',
                    'frequency': 'Once daily',
                    'duration': '7 days',
                    'instructions': 'Take in the evening',
                }],
            })
