"""Domain layer — layer types, identity contract, and registry rules.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
