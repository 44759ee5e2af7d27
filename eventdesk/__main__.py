"""
Package entry point.

Allows running the application via:

    python -m eventdesk

This simply forwards execution to eventdesk.cli.main().
"""

from eventdesk.cli import main

if __name__ == "__main__":
    main()
