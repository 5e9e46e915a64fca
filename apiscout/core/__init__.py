"""Core credential, token and HTTP call machinery."""
