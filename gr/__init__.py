"""Release orchestration for the goravel repository family."""

__version__ = "0.3.0"
