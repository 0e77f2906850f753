"""Business modules for DocDraft.

Each module is self-contained with its own schemas, services and routes.
"""
