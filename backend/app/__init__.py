"""
SentenceBoard Backend - Application Package
=============================================

A small message board: accounts register locally or sign in with Google,
and logged-in users post short categorized sentences that anyone can read
but only the author can edit or delete.

Layers:
    routes/       HTTP concerns (forms, JSON, redirects)
    permissions   session → account resolution, ownership rule
    services/     business logic (accounts, sessions, sentences, OAuth)
    models/       SQLAlchemy ORM tables
    schemas/      Pydantic API contracts
    database      async engine and per-request sessions
"""

__version__ = "1.0.0"
