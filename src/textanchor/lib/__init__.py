"""Shared utilities: errors and logging configuration."""
