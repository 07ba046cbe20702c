"""
URL mappings for the health portal API.

Paths follow the front-end's endpoint table and carry no trailing
slash.  Mutations are POSTs to verb-suffixed paths
(``.../<id>/cancel``) rather than REST verbs on one resource URL.
"""
from django.urls import path, include

from .auth_views import (
    jwt_refresh_view,
    login_view,
    logout_view,
    profile_update_view,
    profile_view,
    signup_view,
)
from .views import announcements, appointments, doctors, health, patients, prescriptions, schedule

urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),

    # auth & profile
    path('api/auth/signup', signup_view, name='signup_view'),
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/auth/logout', logout_view, name='logout_view'),
    path('api/profile', profile_view, name='profile_view'),
    path('api/profile/update', profile_update_view, name='profile_update_view'),

    # doctor directory
    path('api/doctors', doctors.doctor_list, name='doctor_list'),
    path('api/doctors/<int:doctor_id>', doctors.doctor_detail, name='doctor_detail'),
    path('api/doctors/<int:doctor_id>/slots', doctors.doctor_slots, name='doctor_slots'),

    # doctor calendar
    path('api/schedule', schedule.schedule_day, name='schedule_day'),
    path('api/schedule/slots', schedule.slot_create, name='slot_create'),
    path('api/schedule/slots/<int:slot_id>/update', schedule.slot_update, name='slot_update'),
    path('api/schedule/slots/<int:slot_id>/delete', schedule.slot_delete, name='slot_delete'),

    # appointments
    path('api/appointments', appointments.appointment_list, name='appointment_list'),
    path('api/appointments/book', appointments.appointment_book, name='appointment_book'),
    path('api/appointments/<int:appointment_id>', appointments.appointment_detail, name='appointment_detail'),
    path('api/appointments/<int:appointment_id>/cancel', appointments.appointment_cancel,
         name='appointment_cancel'),
    path('api/appointments/<int:appointment_id>/reschedule', appointments.appointment_reschedule,
         name='appointment_reschedule'),
    path('api/appointments/<int:appointment_id>/status', appointments.appointment_status,
         name='appointment_status'),

    # announcements
    path('api/announcements', announcements.announcement_list, name='announcement_list'),
    path('api/announcements/mine', announcements.announcement_mine, name='announcement_mine'),
    path('api/announcements/create', announcements.announcement_create, name='announcement_create'),
    path('api/announcements/<int:announcement_id>/publish', announcements.announcement_publish,
         name='announcement_publish'),
    path('api/announcements/<int:announcement_id>/delete', announcements.announcement_delete,
         name='announcement_delete'),

    # prescriptions
    path('api/prescriptions', prescriptions.prescription_list, name='prescription_list'),
    path('api/prescriptions/create', prescriptions.prescription_create, name='prescription_create'),
    path('api/prescriptions/frequency-options', prescriptions.frequency_options, name='frequency_options'),
    path('api/prescriptions/<int:prescription_id>', prescriptions.prescription_detail,
         name='prescription_detail'),

    # doctor's patients
    path('api/patients', patients.patient_list, name='patient_list'),
]
