"""
Snippet Manager Backend: Middleware Package
===========================================

Middleware Chain (outermost first):
    Request → [CORS] → [Request ID] → [Logging] → [Auth Gate] → Route Handler

    1. CORS: answers preflight requests, which carry no token
    2. Request ID: correlation id for every later log line and error body
    3. Logging: access log, including requests the auth gate rejects
    4. Auth Gate: rejects unauthenticated calls to /snippets, /tags, /folders
       before they reach a handler
"""
