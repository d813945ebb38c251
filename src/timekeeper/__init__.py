"""Timekeeper package.

Attendance and leave engine organized by feature modules (clock, worklogs,
overtime, leaves, ...) with a thin Flask controller layer over service and
repository layers.
"""
