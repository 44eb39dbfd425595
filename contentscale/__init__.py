"""ContentScale consulting platform."""
