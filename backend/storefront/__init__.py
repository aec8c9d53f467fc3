"""Storefront backend: catalog, orders and role-based back office."""
