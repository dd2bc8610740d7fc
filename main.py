"""Main entry point for the farmedic reminder service."""

from farmedic.main import run

if __name__ == "__main__":
    run()
