"""Data models for the Events API."""
