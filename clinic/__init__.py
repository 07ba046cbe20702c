"""Clinic application for the health portal.

This package contains models, serializers, services, views and route
registrations for profiles, doctor schedules, appointments,
announcements and prescriptions.
"""
