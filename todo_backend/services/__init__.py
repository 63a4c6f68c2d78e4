# Services package init
"""
Todo Backend — Services Layer
===============================

Service Inventory:
    - PasswordService: argon2id hashing and verification
    - UserService:     credential store (users table)
    - SessionService:  session token issuance, resolution, expiry sweep
    - TodoService:     owner-scoped todo store
    - AuthService:     login-or-register and token authentication

Services take their collaborators (an AsyncSession, other services) at
construction; todo_backend.dependencies builds them per request.
"""
