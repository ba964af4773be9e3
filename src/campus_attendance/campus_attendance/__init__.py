"""Campus Attendance package.

This package is organized by feature modules (students, attendance, dashboard, ...)
with a thin Flask controller layer and service/repository layers.
"""
