"""Allow ``python -m yatijapp_tui``."""

from yatijapp_tui.cli import main

if __name__ == "__main__":
    main()
