"""Core HR module — Employee and Location models."""

from leave_balance.core_hr.models import Employee, Location

__all__ = ["Employee", "Location"]
