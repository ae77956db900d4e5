"""Domain services for the POS terminal."""
