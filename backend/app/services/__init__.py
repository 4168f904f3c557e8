# Services package init
"""
Recipe Book Backend — Services Layer
=====================================

What:  Business logic sitting between routes (HTTP) and the database.

Service Inventory:
    - RecipeService: recipe store access and the ownership / like rules
    - TokenVerifier (abstract): bearer token → AuthenticatedUser
    - FirebaseTokenVerifier: verified mode via Firebase Admin
    - UnverifiedTokenDecoder: insecure payload decode for local development
"""
