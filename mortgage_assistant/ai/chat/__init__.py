"""
AI chat module for the mortgage assistant.

Keeps per-session conversation history and pauses mortgage calculations
until the user approves them.
"""
