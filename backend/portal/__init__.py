"""Adapters for the remote SkillMount API (tickets, FAQs, notifications, ...)."""
