#!/usr/bin/env python3
"""
FastAPI application for the School Climate Dashboard

This provides the dashboard API endpoints for:
- In-memory survey processing
- Dashboard data in JSON format
- On-demand CSV downloads of classified suggestions
- AI-generated executive diagnosis
"""

import uuid
from datetime import datetime, timedelta
from io import StringIO
from typing import Optional

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from csv_parser import decode_csv_bytes
from main import generate_school_report
from pipeline import EmptySurveyError, run_pipeline, suggestions_to_dataframe

VERSION = "1.0.0"
CACHE_TTL = timedelta(hours=1)

app = FastAPI(title="School Climate Dashboard", version=VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, replace with specific origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# In-memory cache of aggregated uploads
DATA_CACHE = {}  # {job_id: {"view": AggregateView, "timestamp": datetime, "metadata": dict}}


def purge_expired_cache(now: Optional[datetime] = None) -> int:
    """Remove cache entries older than CACHE_TTL and return how many were dropped."""
    current_time = now or datetime.now()
    expired_keys = [
        job_id for job_id, entry in DATA_CACHE.items()
        if current_time - entry["timestamp"] > CACHE_TTL
    ]
    for key in expired_keys:
        del DATA_CACHE[key]
        print(f"Cleaned up expired cache entry: {key}")
    return len(expired_keys)


def get_cache_entry(job_id: str) -> dict:
    if job_id not in DATA_CACHE:
        raise HTTPException(status_code=404, detail="Job ID not found or data has expired.")
    return DATA_CACHE[job_id]


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "version": VERSION}


@app.post("/api/analyze")
async def analyze_survey(survey_file: UploadFile = File(...)):
    """
    Upload a survey export, run the pipeline and return the dashboard data.
    """
    if not survey_file.filename or not survey_file.filename.lower().endswith('.csv'):
        raise HTTPException(status_code=400, detail="Only CSV files are allowed")

    try:
        text = decode_csv_bytes(await survey_file.read())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        print(f"Processing survey file: {survey_file.filename}")
        view = run_pipeline(text)
    except EmptySurveyError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        print(f"Pipeline error: {str(e)}")
        import traceback
        traceback.print_exc()
        raise HTTPException(status_code=500, detail=f"An error occurred during analysis: {str(e)}")

    purge_expired_cache()

    job_id = str(uuid.uuid4())
    metadata = {
        "surveyFile": survey_file.filename,
        "totalRecords": view.total,
        "totalSuggestions": len(view.suggestions),
    }
    DATA_CACHE[job_id] = {
        "view": view,
        "timestamp": datetime.now(),
        "metadata": metadata,
    }
    print(f"Cached results with job ID: {job_id}")

    return {
        "jobId": job_id,
        "aggregate": view.model_dump(),
        "metadata": metadata,
    }


@app.get("/api/job/{job_id}/status")
async def get_job_status(job_id: str):
    """
    Get the status and metadata for a job.
    """
    cache_entry = get_cache_entry(job_id)
    return {
        "jobId": job_id,
        "status": "completed",
        "timestamp": cache_entry["timestamp"].isoformat(),
        "metadata": cache_entry["metadata"],
    }


@app.get("/api/suggestions/{job_id}/export")
async def export_suggestions_csv(job_id: str, role: Optional[str] = None, sentiment: Optional[str] = None):
    """
    Generates and serves the classified suggestions CSV on-demand.
    """
    cache_entry = get_cache_entry(job_id)

    try:
        df = suggestions_to_dataframe(cache_entry["view"], role=role, sentiment=sentiment)

        stream = StringIO()
        df.to_csv(stream, index=False)
        csv_content = stream.getvalue()

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"suggestions_{timestamp}.csv"

        response = StreamingResponse(iter([csv_content]), media_type="text/csv")
        response.headers["Content-Disposition"] = f"attachment; filename={filename}"

        print(f"CSV download prepared: {filename} ({len(df)} rows)")
        return response

    except Exception as e:
        print(f"Download error for job {job_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error generating CSV download: {str(e)}")


@app.post("/api/report/{job_id}")
async def create_report(job_id: str):
    """
    Generate the AI executive diagnosis for a processed upload.
    """
    cache_entry = get_cache_entry(job_id)
    report = generate_school_report(cache_entry["view"])
    return {"jobId": job_id, "report": report}


if __name__ == "__main__":
    import uvicorn

    print("Starting School Climate Dashboard...")
    print("API will be available at: http://localhost:8000")
    print("API documentation at: http://localhost:8000/docs")

    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
