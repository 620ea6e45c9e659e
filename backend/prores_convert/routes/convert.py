"""
Conversion endpoints: upload, status polling and download.

HTTP adapter over JobEngine. Errors are returned as JSON bodies with an
"error" field; conversion failures only show up through status polls.
"""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import FileResponse, JSONResponse

from ..jobs.engine import JobEngine
from ..jobs.errors import (
    JobNotFoundError,
    JobNotReadyError,
    MissingUploadError,
    UploadTooLargeError,
)
from ..jobs.models import ConvertOptions, JobStatusResponse, SubmitResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["convert"])

QUICKTIME_MEDIA_TYPE = "video/quicktime"

# Form values that switch an option off; anything else (or absent) keeps it on
_FALSE_VALUES = {"0", "false", "no", "off"}


def parse_flag(value: Optional[str], default: bool = True) -> bool:
    """Interpret a multipart form flag."""
    if value is None:
        return default
    return value.strip().lower() not in _FALSE_VALUES


def _get_engine(request: Request) -> JobEngine:
    return request.app.state.job_engine


@router.post("/convert", response_model=SubmitResponse)
def convert(
    request: Request,
    file: Optional[UploadFile] = File(None),
    keep_audio: Optional[str] = Form(None, alias="keepAudio"),
    copy_metadata: Optional[str] = Form(None, alias="copyMetadata"),
    copy_meta: Optional[str] = Form(None, alias="copyMeta"),
):
    """
    Accept an upload and start converting it.

    Returns as soon as the converter has been launched.

    Example Response:
        {"jobId": "3f9c0a6d2b7e41c58a90"}
    """
    if file is None:
        return JSONResponse(status_code=400, content={"error": "No file uploaded"})

    options = ConvertOptions(
        keep_audio=parse_flag(keep_audio),
        copy_metadata=parse_flag(copy_metadata if copy_metadata is not None else copy_meta),
    )

    engine = _get_engine(request)
    try:
        job_id = engine.submit(file.file, filename=file.filename, options=options)
    except MissingUploadError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except UploadTooLargeError as e:
        return JSONResponse(status_code=413, content={"error": str(e)})
    except Exception as e:
        logger.exception(f"[Jobs] Could not start conversion: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})
    finally:
        file.file.close()

    return SubmitResponse(job_id=job_id)


@router.get("/status/{job_id}", response_model=JobStatusResponse)
def get_status(job_id: str, request: Request):
    """
    Get job status and heuristic progress.

    Example Response:
        {"status": "processing", "progress": 37, "error": null}
    """
    status = _get_engine(request).get_status(job_id)
    if status is None:
        return JSONResponse(
            status_code=404,
            content={"status": "error", "progress": 0, "error": "Not found"},
        )
    return status


@router.get("/download/{job_id}")
def download(job_id: str, request: Request):
    """Stream the converted .mov file for a finished job."""
    try:
        artifact = _get_engine(request).get_download(job_id)
    except JobNotFoundError:
        return JSONResponse(status_code=404, content={"error": "Not found"})
    except JobNotReadyError:
        return JSONResponse(status_code=400, content={"error": "Not ready"})

    return FileResponse(
        path=artifact.path,
        media_type=QUICKTIME_MEDIA_TYPE,
        filename=artifact.filename,
    )
