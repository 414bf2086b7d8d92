"""Shared infrastructure for GrammarFix services: logging, errors, config, middleware."""
