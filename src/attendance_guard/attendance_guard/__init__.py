"""Attendance Guard package.

Device & network authorization core of the attendance system, organized by
feature modules (allowlist, devices, device_requests, attendance, ...) with a
thin Flask controller layer over service/repository layers.
"""
