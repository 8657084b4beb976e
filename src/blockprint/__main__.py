"""Allow ``python -m blockprint``."""

from blockprint.cli import main

if __name__ == "__main__":
    main()
