"""Clinic application of the MedFlow backend.

Models, the real-time queue protocol (``care.realtime``), the services
it drives and the HTTP API routes.
"""
