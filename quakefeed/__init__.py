"""Background USGS earthquake feed poller with a JSON status endpoint."""

__version__ = "1.0.0"
