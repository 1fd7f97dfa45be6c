"""promptweave: compose prompts from text and reusable prompt blocks."""

__version__ = "0.1.0"
