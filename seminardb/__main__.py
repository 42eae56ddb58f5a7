"""
Package entry point.

Allows running the application via:

    python -m seminardb <world-size> <command-file>

This simply forwards execution to seminardb.cli.main().
"""

from seminardb.cli import main

if __name__ == "__main__":
    main()
