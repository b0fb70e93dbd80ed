"""Storage, configuration, workspace access and server transport."""
