"""Content resolution and rendering core."""
