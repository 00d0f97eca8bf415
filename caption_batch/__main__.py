"""Package entry point for ``python -m caption_batch``.

Starts the HTTP front end with uvicorn.
"""

from caption_batch.server.app import run_api

if __name__ == "__main__":
    run_api()
