"""Client-side use cases."""
