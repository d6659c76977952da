"""Timeclock package.

Employee time-and-attendance tracking organized by feature modules
(attendance, schedules, employees, ...) with a thin Flask controller layer
on top of service/repository layers backed by a document store.
"""
