"""n2nxs command-line interface."""
