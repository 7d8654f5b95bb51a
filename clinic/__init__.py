"""Clinic application for the aura scheduling backend.

This package contains the scheduling models, the slot engine services,
serializers, views and route registrations.  The slot engine itself
lives in :mod:`clinic.services` and has no dependency on the HTTP layer.
"""
