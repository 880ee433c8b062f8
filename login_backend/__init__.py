"""Login Backend - user registration, login and JWT token issuance."""

__version__ = "0.1.0"
