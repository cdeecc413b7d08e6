"""Shared settings, logging, time helpers and data models."""
