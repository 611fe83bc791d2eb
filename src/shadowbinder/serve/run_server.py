"""Helper to launch the generation endpoint under uvicorn."""
from __future__ import annotations
import os

import uvicorn

def main() -> None:
    host = os.getenv("SHADOWBINDER_HOST", "0.0.0.0")
    port = int(os.getenv("SHADOWBINDER_PORT", "8000"))
    uvicorn.run("shadowbinder.serve.fastapi_app:app", host=host, port=port, log_config=None)

if __name__ == "__main__":
    main()
