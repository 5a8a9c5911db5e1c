"""
Logistics ERP core.

Domain rules shared by the ERP services: reporting-line integrity for HR,
the notification delivery lifecycle and notification delivery statistics.
"""

__version__ = "1.0.0"
