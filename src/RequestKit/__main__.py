"""Allow ``python -m RequestKit``."""

from .cli import main

if __name__ == "__main__":
    main()
