"""Replacement text transforms for one-picgo."""
