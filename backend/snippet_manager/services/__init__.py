"""
Snippet Manager Backend: Services Layer
=======================================

Business logic that sits between routes and stores.

Service Inventory:
    - CredentialService: registration, password verification, token issuance
"""
