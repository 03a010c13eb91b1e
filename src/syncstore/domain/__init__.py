"""Catalog domain: model, ports and services."""
