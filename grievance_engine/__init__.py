"""
Grievance Engine - lifecycle, escalation and audit for citizen grievances.

Tracks citizen complaints from submission through official resolution,
reporter and community verification, and escalation up the
panchayat -> block -> district -> state authority ladder. Every state
change is recorded in a hash-chained, append-only audit log.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
