"""Core search, query and analysis components."""
