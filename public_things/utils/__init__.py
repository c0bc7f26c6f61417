"""Small helpers shared by the CLI and server."""

from .env_loader import load_dotenv

__all__ = ["load_dotenv"]
