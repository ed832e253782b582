"""
Records API Lambda backend.

Subpackages:

• `records_api.database` — credentials and cached MySQL connections
• `records_api.records` — database-backed GET endpoint
• `records_api.hello` — static greeting endpoint
"""
