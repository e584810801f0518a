"""Main entry point for running binsim as a module."""

from .cli import main

if __name__ == "__main__":
    main()
