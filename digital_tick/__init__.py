"""Digital Tick AI chat backend."""
