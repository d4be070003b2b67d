"""
Package entry point.

Allows running the application via:

    python -m lecturecal

This simply forwards execution to lecturecal.cli.main().
"""

from lecturecal.cli import main

if __name__ == "__main__":
    main()
