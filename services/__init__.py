"""Service layer for the café analytics application."""
