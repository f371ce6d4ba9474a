"""CLI layer for tillbook application."""
