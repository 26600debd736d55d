"""
TicketPilot: turn documents into reviewed Jira tickets.
"""

__version__ = "1.0.0"
