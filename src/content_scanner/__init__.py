"""content-scanner: antivirus scanning gateway for Matrix media attachments."""

__version__ = "0.1.0"
