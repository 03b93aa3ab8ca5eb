"""Shell dialects. Look them up through ShellRegistry."""
