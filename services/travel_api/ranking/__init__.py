"""Weather-driven activity ranking."""
