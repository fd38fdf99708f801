"""Media repository access and attachment decryption."""
