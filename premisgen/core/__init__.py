"""Core data models shared across premisgen."""
