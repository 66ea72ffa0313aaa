"""Starlette ASGI application exposing the job lifecycle over HTTP."""

from __future__ import annotations

import json
import logging

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from .. import __version__
from ..exceptions import (
    DuplicateJobError,
    FixApplicationError,
    FixIndexInvalidError,
    JobNotFoundError,
    JobNotReadyError,
    LineOutOfRangeError,
    SecurityError,
)
from ..jobs import Orchestrator, PullRequestEvent
from ..models import JobStatus

logger = logging.getLogger(__name__)


def _int_param(request: Request, name: str, default: int) -> int:
    try:
        return int(request.query_params.get(name, default))
    except ValueError:
        return default


async def _json_body(request: Request):
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


def create_app(orchestrator: Orchestrator) -> Starlette:
    """Build the Starlette application wired to *orchestrator*."""

    async def index(request: Request) -> JSONResponse:
        return JSONResponse({"service": "aegis-ai", "status": "ok", "version": __version__})

    async def webhook(request: Request) -> JSONResponse:
        payload = await _json_body(request)
        if payload is None:
            return JSONResponse({"error": "Invalid JSON"}, status_code=400)
        try:
            event = PullRequestEvent.from_payload(payload)
        except ValueError as e:
            return JSONResponse({"error": str(e)}, status_code=400)

        try:
            job = orchestrator.submit_webhook(event)
        except DuplicateJobError as e:
            existing = orchestrator.get(e.job_id)
            return JSONResponse(
                {
                    "status": "duplicate",
                    "message": "Analysis already exists for this pull request",
                    "pr": event.number,
                    "analysis_id": existing.id,
                    "analysis_status": existing.status.value,
                }
            )
        if job is None:
            return JSONResponse({"status": "ignored"})
        return JSONResponse(
            {
                "status": "accepted",
                "message": "AI analysis started in background",
                "pr": event.number,
                "analysis_id": job.id,
            },
            status_code=202,
        )

    async def analyze(request: Request) -> JSONResponse:
        payload = await _json_body(request)
        repo_url = payload.get("repo_url") if isinstance(payload, dict) else None
        if not isinstance(repo_url, str) or not repo_url.strip():
            return JSONResponse({"error": "repo_url is required"}, status_code=400)

        job = orchestrator.submit_manual(repo_url.strip())
        return JSONResponse(
            {
                "analysis_id": job.id,
                "status": job.status.value,
                "message": "Analysis started",
            },
            status_code=202,
        )

    async def analysis_detail(request: Request) -> JSONResponse:
        job_id = request.path_params["analysis_id"]
        try:
            job = orchestrator.get(job_id)
        except JobNotFoundError:
            return JSONResponse({"error": "Analysis not found"}, status_code=404)

        if job.status is JobStatus.FAILED:
            return JSONResponse({"status": "failed", "error": "Analysis failed"}, status_code=409)
        if job.status is not JobStatus.COMPLETED:
            return JSONResponse({"status": job.status.value}, status_code=202)
        return JSONResponse(job.to_dict(include_result=True))

    async def analysis_status(request: Request) -> JSONResponse:
        job_id = request.path_params["analysis_id"]
        try:
            status = orchestrator.status(job_id)
        except JobNotFoundError:
            return JSONResponse({"error": "Analysis not found"}, status_code=404)
        return JSONResponse({"analysis_id": job_id, "status": status.value})

    async def analyses(request: Request) -> JSONResponse:
        page = orchestrator.list_completed(
            _int_param(request, "page", 1), _int_param(request, "limit", 10)
        )
        return JSONResponse(page.to_dict())

    async def apply_fix(request: Request) -> JSONResponse:
        auth = request.headers.get("authorization", "")
        if not auth.startswith("Bearer ") or not auth[len("Bearer "):].strip():
            return JSONResponse({"error": "No Bearer token provided"}, status_code=401)
        credential = auth[len("Bearer "):].strip()

        job_id = request.path_params["analysis_id"]
        try:
            fix_index = int(request.path_params["fix_index"])
        except ValueError:
            return JSONResponse({"error": "Invalid fix index"}, status_code=400)

        try:
            result = await run_in_threadpool(orchestrator.apply_fix, job_id, fix_index, credential)
        except JobNotFoundError:
            return JSONResponse({"error": "Analysis not found"}, status_code=404)
        except JobNotReadyError as e:
            return JSONResponse(
                {"error": "Analysis not ready", "status": e.status}, status_code=409
            )
        except FixIndexInvalidError:
            return JSONResponse({"error": "Fix index out of range"}, status_code=400)
        except (LineOutOfRangeError, SecurityError) as e:
            return JSONResponse(e.to_dict(), status_code=400)
        except FixApplicationError as e:
            logger.error("Fix %s/%d failed: %s", job_id, fix_index, e.message)
            return JSONResponse(e.to_dict(), status_code=500)

        return JSONResponse(result.to_dict())

    routes = [
        Route("/", index),
        Route("/webhook", webhook, methods=["POST"]),
        Route("/api/analyze", analyze, methods=["POST"]),
        Route("/api/analyses", analyses),
        Route("/api/analysis/{analysis_id}", analysis_detail),
        Route("/api/analysis/{analysis_id}/status", analysis_status),
        Route("/api/analysis/{analysis_id}/fix/{fix_index}", apply_fix, methods=["POST"]),
    ]

    return Starlette(routes=routes)
