"""Infrastructure adapters for the fact conflict engine."""
