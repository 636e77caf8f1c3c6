"""Utility helpers for docrank."""
