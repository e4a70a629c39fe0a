"""Configuration, logging, errors and clock helpers."""
