"""
Models

Architecture:
- models.domain: pure Python dataclasses the services operate on
- Storage details (PostgreSQL) are abstracted via repositories
- HTTP response shaping lives in the api package, not here
"""
