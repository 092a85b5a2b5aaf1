"""Synchronise a Gemini gemlog onto a WriteFreely blog."""

__version__ = "0.3.0"
