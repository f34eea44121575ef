"""
Auth package for the Linkbio Platform API.

Resolves the caller identity of a request with HTTP Basic credentials.
Password storage is deliberately thin; swap `CredentialStore` for a real
identity provider in production.
"""
