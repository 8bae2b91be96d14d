"""Pydantic request/response models and embedded document records."""
