"""Pure analysis functions over observation series."""
