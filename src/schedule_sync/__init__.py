"""Personal task scheduler: recurrence, time grid, layout and statistics engine."""

__version__ = "0.1.0"
