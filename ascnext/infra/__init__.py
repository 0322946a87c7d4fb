"""Adapters for external systems (HTTP, App Store Connect)."""
