"""Classroom Attendance package.

Organized by feature modules (classes, sessions, attendance, history, ...)
with a thin Flask controller layer on top of service/repository layers.
"""
