"""Serial control of a two-axis stepper scanner stage and serial port discovery."""

__version__ = "0.1.0"
__all__ = ["buffer", "messages", "enumerator", "winports", "scanner", "cli"]