"""Authentication and authorization.

Learn: Accounts log in with username/password and receive a short-lived
JWT. Every item route resolves that token to an Identity, and the
ownership guard scopes each item operation to that identity.
"""
