"""Package lists and the git-tracked setup script."""
