"""Built-in CLI sub-commands."""
