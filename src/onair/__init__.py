"""OnAir: an unattended AI DJ radio station."""

__version__ = "0.1.0"
