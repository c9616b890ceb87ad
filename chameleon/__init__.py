"""Chameleon Edge - tenant resolution and SSR routing for multi-tenant sites."""

__version__ = "0.1.0"
