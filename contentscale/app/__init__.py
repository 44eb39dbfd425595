"""ContentScale API application."""
