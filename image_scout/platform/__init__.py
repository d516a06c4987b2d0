"""Platform collaborators: transform gate and image storage."""
