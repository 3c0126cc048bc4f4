"""
Backend Entry Point
Run with: python main.py [config.json]
"""
import sys

from collector_app.main import main

if __name__ == "__main__":
    sys.exit(main())
