"""Prompt templates for the receptionist assistant."""
