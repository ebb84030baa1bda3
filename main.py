#!/usr/bin/env python3
"""
Main entry point for gemini-gateway server.
"""

from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from gemini_gateway.cli import main  # noqa: E402

if __name__ == "__main__":
    main()
