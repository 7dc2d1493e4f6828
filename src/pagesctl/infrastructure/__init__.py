"""Adapters over external tools: the build command, git, and the filesystem."""
