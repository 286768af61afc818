"""shush: encrypt, decrypt and inject secrets with AWS KMS."""

__version__ = "0.1.0"
