"""
SentenceBoard Backend - Routes Package
========================================

Route Inventory:
    - auth.py:       /auth/register, /auth/login, /auth/google[/redirect],
                     /auth/dashboard, /auth/logout      (HTML, redirects)
    - pages.py:      /, /dashboard, /profile             (HTML)
    - sentences.py:  /api/sentences[...]                 (JSON)
    - health.py:     /health                             (JSON)

Routes stay thin: pull values out of the request, resolve the caller through
app.permissions, call a service, shape the response.
"""
