"""Local desktop implementations of the workflow collaborators."""
