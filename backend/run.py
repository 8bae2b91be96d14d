#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Worker and scheduler run separately:
    celery -A trailblazers.tasks.celery_app worker -Q celery,notifications,maintenance
    celery -A trailblazers.tasks.celery_app beat
"""
import os

import uvicorn

if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))
    print(f"Starting TrailBlazers API on http://localhost:{port} (docs at /docs)")
    uvicorn.run("trailblazers.main:app", host="0.0.0.0", port=port, reload=True, log_level="info")
