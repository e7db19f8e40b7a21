"""Quality score fusion (signal, pattern and fit components) and weight tables."""
