"""Leave balance breakdown service."""
