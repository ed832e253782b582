"""Hello API Lambda: static greeting endpoint."""
