"""Quality checks and the check registry."""
