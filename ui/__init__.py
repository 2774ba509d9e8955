"""Qt integration for the slice cache."""
