"""
SentenceBoard Backend - Services Layer
========================================

Service Inventory:
    - passwords:        argon2 hashing helpers
    - AccountService:   registration, local login, Google account linking
    - SessionService:   server-side sessions and signed cookies
    - GoogleOAuthClient: token exchange and profile fetch over httpx
    - SentenceService:  sentence CRUD, filters and search

Every service is a stateless singleton that receives the request's
AsyncSession explicitly, so unit tests pass an AsyncMock instead.
"""
