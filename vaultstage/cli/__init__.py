"""vaultstage command-line interface."""
