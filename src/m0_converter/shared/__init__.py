"""Shared models for the M0 converter."""
