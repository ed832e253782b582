"""Records API Lambda: database-backed GET endpoint."""
