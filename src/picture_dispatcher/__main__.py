"""Allow running as ``python -m picture_dispatcher``."""

from picture_dispatcher.cli import main

if __name__ == "__main__":
    main()
