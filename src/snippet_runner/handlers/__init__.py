"""Local snippet handlers run in-process by the runner."""
