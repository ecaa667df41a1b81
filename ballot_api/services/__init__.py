"""Chain access and ballot command services."""
