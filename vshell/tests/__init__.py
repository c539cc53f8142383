"""VShell test suite."""
