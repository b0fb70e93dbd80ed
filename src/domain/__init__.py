"""Domain models, signatures and errors."""
