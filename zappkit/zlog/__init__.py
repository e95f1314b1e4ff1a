"""Leveled logging with fields, session ids, colour hooks and interceptors."""

__all__ = ["color", "config", "core", "hook", "log"]