"""Shared utilities for the mood detection service."""
