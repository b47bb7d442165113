"""Wine tour availability and pricing service."""
