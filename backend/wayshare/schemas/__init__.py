"""Pydantic transfer objects and shared response models."""
