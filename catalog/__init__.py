"""Catalog query and patch tool for the products table."""
