"""Command-line interface. Run with: python -m kneeplanner [landmarks.json] [--show]"""
import sys

from kneeplanner.main import main

if __name__ == "__main__":
    sys.exit(main())
