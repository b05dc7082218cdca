"""Teach-back chat service."""
