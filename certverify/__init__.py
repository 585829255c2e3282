"""QR certificate verification service."""
