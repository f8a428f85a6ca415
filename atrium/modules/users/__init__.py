"""
User Management Module

Separation of concerns:
- auth: Bearer token verification and role checks
- domain: Domain models and service errors
- identity: Identity-provider client
- services: Business logic
- repositories: Data access for locally owned addresses
- api: REST API endpoints
"""
