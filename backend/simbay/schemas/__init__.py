"""Pydantic request and response models for the SimBay API."""
