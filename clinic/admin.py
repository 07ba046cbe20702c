"""
Django admin registrations for the portal models.
"""
from django.contrib import admin

from .models import (
    User,
    Profile,
    DoctorSchedule,
    Appointment,
    AppointmentTransition,
    Announcement,
    Prescription,
    AuditEvent,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'role', 'is_staff', 'is_superuser')
    list_filter = ('role',)
    search_fields = ('username', 'email', 'first_name', 'last_name')


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'user', 'phone', 'specialization')
    list_filter = ('user__role',)
    search_fields = ('full_name', 'user__email', 'phone', 'specialization')


@admin.register(DoctorSchedule)
class DoctorScheduleAdmin(admin.ModelAdmin):
    list_display = ('doctor', 'date', 'start_time', 'end_time', 'status', 'max_appointments')
    list_filter = ('status', 'date')
    search_fields = ('doctor__username', 'doctor__profile__full_name')


class AppointmentTransitionInline(admin.TabularInline):
    model = AppointmentTransition
    extra = 0
    readonly_fields = ('from_status', 'to_status', 'operator', 'timestamp', 'reason')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'appointment_date', 'status')
    list_filter = ('status',)
    search_fields = ('patient__username', 'doctor__username')
    inlines = [AppointmentTransitionInline]


@admin.register(Announcement)
class AnnouncementAdmin(admin.ModelAdmin):
    list_display = ('title', 'author', 'category', 'is_published', 'published_at')
    list_filter = ('category', 'is_published')
    search_fields = ('title', 'content')


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient_name', 'doctor', 'created_at')
    search_fields = ('patient_name', 'diagnosis')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
    readonly_fields = ('user', 'action', 'object_type', 'object_id', 'detail', 'created_at')
