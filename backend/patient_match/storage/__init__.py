"""Filesystem storage helpers."""
