"""Domain layer for tillbook application."""
