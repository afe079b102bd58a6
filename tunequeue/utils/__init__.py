"""Utility helpers for tunequeue."""
