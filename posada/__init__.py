"""Posada authentication and session API."""
