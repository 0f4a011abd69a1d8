"""gamelens: game screenshot analysis through a vision model and a reasoning model."""

__version__ = "0.1.0"
