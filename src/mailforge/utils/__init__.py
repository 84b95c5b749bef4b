"""Utility helpers for mailforge."""
