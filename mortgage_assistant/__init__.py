"""Mortgage assistant chat API."""
