"""
Prompt templates.
"""

from ticketpilot.prompts.ticket_generation import TICKET_GENERATION_SYSTEM_PROMPT

__all__ = ["TICKET_GENERATION_SYSTEM_PROMPT"]
