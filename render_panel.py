"""Render cluster chart data from the command line."""

from panel.cli import main


if __name__ == "__main__":
    main()
