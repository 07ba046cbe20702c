"""
Database models for the health portal.

Users carry a role ('patient' or 'doctor') and a one-to-one
:class:`Profile` with the personal and professional details shown in
the doctor directory.  Doctors publish :class:`DoctorSchedule` slots
that patients book into :class:`Appointment` rows; doctors also write
:class:`Announcement` and :class:`Prescription` records.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom user model with a portal role.

    Accounts created through sign-up use the e-mail address as the
    username so that either may be used to log in.
    """
    ROLE_PATIENT = 'patient'
    ROLE_DOCTOR = 'doctor'
    ROLE_CHOICES = [
        (ROLE_PATIENT, 'Patient'),
        (ROLE_DOCTOR, 'Doctor'),
    ]
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)

    @property
    def is_doctor(self) -> bool:
        return self.role == self.ROLE_DOCTOR

    @property
    def is_patient(self) -> bool:
        return self.role == self.ROLE_PATIENT

    def display_name(self) -> str:
        profile = getattr(self, 'profile', None)
        if profile is not None and profile.full_name:
            return profile.full_name
        return self.get_full_name() or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Profile(models.Model):
    """Personal details for any user plus the professional fields doctors fill in."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    full_name = models.CharField(max_length=255, db_index=True)
    phone = models.CharField(max_length=32, blank=True, null=True)
    avatar_url = models.URLField(max_length=500, blank=True, null=True)
    bio = models.TextField(blank=True, null=True)
    date_of_birth = models.DateField(blank=True, null=True)
    gender = models.CharField(max_length=32, blank=True, null=True)
    emergency_contact = models.CharField(max_length=255, blank=True, null=True)

    # doctor only
    specialization = models.CharField(max_length=255, blank=True, null=True)
    qualifications = models.CharField(max_length=255, blank=True, null=True)
    experience_years = models.PositiveIntegerField(blank=True, null=True)
    consultation_fee = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.full_name} ({self.user.role})"


class DoctorSchedule(models.Model):
    """A bookable time slot on a doctor's calendar."""
    STATUS_AVAILABLE = 'available'
    STATUS_BOOKED = 'booked'
    STATUS_BLOCKED = 'blocked'
    STATUS_CHOICES = [
        (STATUS_AVAILABLE, 'Available'),
        (STATUS_BOOKED, 'Booked'),
        (STATUS_BLOCKED, 'Blocked'),
    ]

    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='schedule_slots')
    date = models.DateField(db_index=True)
    start_time = models.TimeField()
    end_time = models.TimeField()
    # filtered on by every availability lookup
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_AVAILABLE, db_index=True)
    max_appointments = models.PositiveIntegerField(default=1)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'date', 'start_time'], name='slot_doctor_date_start_idx'),
            models.Index(fields=['doctor', 'status', 'date'], name='slot_doctor_status_date_idx'),
        ]

    def __str__(self) -> str:
        return f"Slot(d={self.doctor_id}, {self.date} {self.start_time:%H:%M}-{self.end_time:%H:%M}, {self.status})"


class Appointment(models.Model):
    STATUS_SCHEDULED = 'scheduled'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_NO_SHOW = 'no_show'
    STATUS_CHOICES = [
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_NO_SHOW, 'No show'),
    ]

    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='patient_appointments')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='doctor_appointments')
    slot = models.ForeignKey(
        DoctorSchedule, null=True, blank=True, on_delete=models.SET_NULL, related_name='appointments'
    )
    appointment_date = models.DateTimeField(db_index=True)
    duration_minutes = models.PositiveIntegerField(default=30, null=True, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_SCHEDULED, db_index=True)
    notes = models.TextField(blank=True, null=True)
    patient_notes = models.TextField(blank=True, null=True)
    doctor_notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'appointment_date'], name='appt_doctor_date_idx'),
            models.Index(fields=['patient', 'appointment_date'], name='appt_patient_date_idx'),
        ]

    def __str__(self) -> str:
        return f"Appointment(p={self.patient_id}, d={self.doctor_id}, {self.appointment_date:%F %H:%M}, {self.status})"


class AppointmentTransition(models.Model):
    """Records a status change of an appointment."""
    appointment = models.ForeignKey(Appointment, related_name='transitions', on_delete=models.CASCADE)
    from_status = models.CharField(max_length=16, null=True, blank=True)
    to_status = models.CharField(max_length=16)
    operator = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='appointment_transitions'
    )
    timestamp = models.DateTimeField(auto_now_add=True)
    reason = models.CharField(max_length=255, blank=True)

    def __str__(self) -> str:
        return f"{self.appointment_id}: {self.from_status} → {self.to_status}"


class Announcement(models.Model):
    """A notice written by a doctor; only published ones are public."""
    CATEGORY_HEALTH_TIP = 'health_tip'
    CATEGORY_NEWS = 'news'
    CATEGORY_EMERGENCY = 'emergency'
    CATEGORY_GENERAL = 'general'
    CATEGORY_CHOICES = [
        (CATEGORY_HEALTH_TIP, 'Health tip'),
        (CATEGORY_NEWS, 'News'),
        (CATEGORY_EMERGENCY, 'Emergency'),
        (CATEGORY_GENERAL, 'General'),
    ]

    author = models.ForeignKey(User, on_delete=models.CASCADE, related_name='announcements')
    title = models.CharField(max_length=255)
    content = models.TextField()
    category = models.CharField(max_length=16, choices=CATEGORY_CHOICES, default=CATEGORY_GENERAL, db_index=True)
    is_published = models.BooleanField(default=False, db_index=True)
    published_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['is_published', 'published_at'], name='announce_published_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.title} [{self.category}]"


class Prescription(models.Model):
    """Medications a doctor prescribed to a patient.

    ``medications`` is a list of objects with ``name``, ``dosage``,
    ``frequency``, ``duration`` and ``instructions`` keys.
    """
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='prescriptions_written')
    patient = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='prescriptions'
    )
    patient_name = models.CharField(max_length=255, db_index=True)
    patient_phone = models.CharField(max_length=32, blank=True, null=True)
    diagnosis = models.TextField()
    medications = models.JSONField(default=list)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'created_at'], name='rx_doctor_created_idx'),
        ]

    def __str__(self) -> str:
        return f"Prescription #{self.id} for {self.patient_name}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.BigIntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
