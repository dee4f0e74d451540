"""Persistence layer for the chess server: users, auth tokens, and games."""
