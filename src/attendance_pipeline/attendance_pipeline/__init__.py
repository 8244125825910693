"""Attendance Pipeline package.

Feature modules (sessions, attendance, recognition, leave, notifications,
reports) each follow the same shape: a frozen dataclass model, a repository
Protocol with MySQL and in-memory implementations, a service holding the
business rules, and a thin Flask controller.
"""
