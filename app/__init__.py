"""
Hospital Appointment Booking

A FastAPI-based system for booking doctor appointments, with role-based
access control, conflict-free slot scheduling and medical history records.
"""

__version__ = "1.0.0"
