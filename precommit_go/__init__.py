"""pre-commit-go: runs pre-commit checks on Go projects, fast."""

__version__ = "0.3.0"
