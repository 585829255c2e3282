"""Service layer: certificate store client and verification flow."""
