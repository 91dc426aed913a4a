"""Normalization, validation and loading of raw payloads."""
