"""Page transports for the reporting api."""
