"""Admission eligibility determination with an immutable audit trail."""

__version__ = "0.1.0"
