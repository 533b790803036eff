"""Billing providers - abstracted external collaborators (stores and lookups)."""
