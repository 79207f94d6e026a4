"""fpcore test suite."""
