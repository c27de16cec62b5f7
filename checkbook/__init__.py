"""Checkbook account sharing, permission request and audit service."""

__version__ = "0.1.0"
