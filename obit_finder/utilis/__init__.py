"""ObitFinder utilities package."""
