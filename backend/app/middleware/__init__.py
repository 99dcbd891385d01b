"""
SentenceBoard Backend - Middleware Package
============================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

The request id is set first so every access log line and every error body
produced further in carries it.
"""
