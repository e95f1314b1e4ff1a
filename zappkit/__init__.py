"""Building blocks for application frameworks: compression, serialization, rolling files, logging, registries and startup ordering."""

__version__ = "0.1.0"