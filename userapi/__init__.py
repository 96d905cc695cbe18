"""User API: token-authenticated user lifecycle service."""
