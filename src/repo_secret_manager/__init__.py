"""repo-secret-manager: keep plaintext secrets out of git repositories."""

__version__ = "2.1.0"
