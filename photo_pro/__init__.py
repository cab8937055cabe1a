"""AI photo editing service backed by a hosted multimodal model."""

__version__ = "1.0.0"
