"""Concrete adapters behind the ``specharvest.interfaces`` contracts."""
