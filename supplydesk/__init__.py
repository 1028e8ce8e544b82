"""Configuration, .env persistence, JSON-backed stores and supplier code and text helpers."""

__version__ = "0.1.0"

__all__ = [
    "admin_supplier_store",
    "config",
    "env_persister",
    "profile_store",
    "push_token_store",
    "supplier_codes",
    "supplier_text",
]