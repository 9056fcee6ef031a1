"""Type inference and record mapping for report results."""
