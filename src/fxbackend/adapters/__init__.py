# src/fxbackend/adapters/__init__.py
"""
Adapters Layer - External Interfaces

This package contains adapters for external systems:
- Providers (finance APIs)
"""

__all__ = []
