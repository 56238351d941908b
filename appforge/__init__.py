"""Build and deploy pipeline for chat-generated tenant applications."""

__version__ = "0.1.0"
