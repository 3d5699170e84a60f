"""Chatmode generation and validation commands."""
