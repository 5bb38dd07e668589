from __future__ import annotations

import uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, HTTPException
from pydantic import BaseModel

from photoresize.services.convert_pipeline import run_pipeline
from photoresize.services.encoders import DEFAULT_OUTPUT_TYPE
from photoresize.services.errors import PhotoResizeError
from photoresize.services.resolution import DEFAULT_RESOLUTION
from photoresize.services.run_config import build_run_config, check_source
from photoresize.services.status_store import read_status, write_status


router = APIRouter(prefix="/jobs", tags=["convert"])


class ConvertRequest(BaseModel):
	source: str
	res: str = DEFAULT_RESOLUTION
	type: str = DEFAULT_OUTPUT_TYPE
	output: Optional[str] = None
	mirror: bool = False


def _new_job_id(resolution: str) -> str:
	# "<WxH>-<12 hex chars>"
	return f"{resolution}-{uuid.uuid4().hex[:12]}"


@router.post("/convert", summary="Resize every image under a directory in the background")
def convert(req: ConvertRequest, background_tasks: BackgroundTasks):
	source_path = Path(req.source)
	try:
		check_source(source_path)
		config = build_run_config(
			source_path,
			resolution=req.res,
			output_type=req.type,
			dest_root=Path(req.output) if req.output else None,
			mirror_tree=req.mirror,
		)
	except PhotoResizeError as exc:
		raise HTTPException(status_code=400, detail=str(exc)) from exc
	job_id = _new_job_id(config.resolution)
	write_status(job_id, {"status": "queued", "step": "Queued"})
	background_tasks.add_task(run_pipeline, job_id, config)
	return {
		"job_id": job_id,
		"status": "queued",
		"source": str(config.source_root),
		"output": str(config.dest_root),
		"resolution": config.resolution,
		"extension": config.extension,
		"status_endpoint": f"/jobs/status/{job_id}",
		"result_endpoint": f"/jobs/result/{job_id}",
	}


@router.get("/status/{job_id}", summary="Get job status")
def status(job_id: str):
	return read_status(job_id)


@router.get("/result/{job_id}", summary="Get job results")
def result(job_id: str):
	data = read_status(job_id)
	if data.get("status") != "completed":
		return {"job_id": job_id, "status": data.get("status"), "message": "not completed yet"}
	return {
		"job_id": job_id,
		"output": data.get("output"),
		"summary": data.get("summary", {}),
	}
