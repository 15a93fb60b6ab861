"""REST and WebSocket API for the Lumina invitation."""
