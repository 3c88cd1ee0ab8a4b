"""Main entry point when executing reqflow as a package.

This allows running the package using python -m reqflow.
"""

from reqflow.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
