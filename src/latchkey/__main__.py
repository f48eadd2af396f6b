"""Entry point for 'python -m latchkey'."""

from latchkey.cli import main

if __name__ == "__main__":
    main()
