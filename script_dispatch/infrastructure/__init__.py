"""Adapters for the management backend and the local database."""
