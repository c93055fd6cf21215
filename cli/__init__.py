"""CLI package -- command line entry points (python -m cli.extract ...)."""
