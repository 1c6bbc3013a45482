"""
Start the grading relay.

Run with: python main.py

Listens on $PORT (default 8000). Configuration comes from the environment
or a .env file in the project root; see grading_relay.config.
"""

from grading_relay.api import run_server

if __name__ == "__main__":
    run_server()
