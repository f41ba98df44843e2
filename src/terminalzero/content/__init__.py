"""Bundled level and file-system content."""
