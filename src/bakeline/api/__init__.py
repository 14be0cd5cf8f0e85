"""Bakeline REST API."""
