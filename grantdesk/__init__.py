"""Grant Desk: section-driven record manager for the grant management console."""
