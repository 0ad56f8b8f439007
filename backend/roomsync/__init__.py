"""Room-based state sync service for flight chess."""
