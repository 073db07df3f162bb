#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

For local development only: uses the in-memory identity provider and the
console email sender unless the environment says otherwise.
"""
import os
import sys
from pathlib import Path

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

os.environ.setdefault("IDENTITY_PROVIDER", "fake")
os.environ.setdefault("EMAIL_PROVIDER", "console")

import uvicorn  # noqa: E402

if __name__ == "__main__":
    print("Starting SimBay development server")
    print("Access at: http://localhost:8000")
    print("API Docs: http://localhost:8000/docs")

    uvicorn.run("simbay.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
