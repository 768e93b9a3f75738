"""Shared test models, enums and fakes."""
