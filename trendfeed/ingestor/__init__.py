"""Upstream trends feed fetching and normalization."""
