"""Host collaborators the runner talks to."""
