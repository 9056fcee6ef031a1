"""Loading and saving configurations."""
