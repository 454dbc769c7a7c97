"""Feature-set dependency staging for packaging builds."""

__version__ = "1.0.0"
