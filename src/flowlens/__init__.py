"""flowlens: transaction query and recurrence engine for personal finance tracking."""

__version__ = "0.1.0"
