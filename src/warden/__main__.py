"""Entry point for 'python -m warden' command.

This module allows the Warden CLI to be invoked using 'python -m warden'.
"""

from warden.cli import main

if __name__ == "__main__":
    main()
