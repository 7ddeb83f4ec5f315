"""Allow ``python -m aaserver``."""

from aaserver.cli import main

if __name__ == "__main__":
    main()
