"""FastAPI surface for the scan gateway."""
