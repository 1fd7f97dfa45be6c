"""Pydantic data models for promptweave."""
