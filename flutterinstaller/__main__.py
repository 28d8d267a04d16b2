"""
Entry point for running the Flutter installer as a module.

Usage: python -m flutterinstaller [command] [options]
"""

from flutterinstaller.cli.parser import main

if __name__ == "__main__":
    main()
