"""Inbound call orchestration for the rental receptionist."""
