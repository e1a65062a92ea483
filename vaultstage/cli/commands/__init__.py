"""vaultstage CLI commands."""
