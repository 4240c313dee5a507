"""Core business logic for the content console.

- sync: local edits, uploads, merging and the save life cycle
"""

__all__: list[str] = []
