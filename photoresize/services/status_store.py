from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Any, Dict


def jobs_dir() -> Path:
	return Path(os.environ.get("PHOTORESIZE_JOBS_DIR", "jobs"))


def status_path(job_id: str) -> Path:
	return jobs_dir() / f"{job_id}.json"


def write_status(job_id: str, data: Dict[str, Any]) -> None:
	"""Replace the job's status file; readers never see a half-written file."""
	path = status_path(job_id)
	path.parent.mkdir(parents=True, exist_ok=True)
	record = {**data, "job_id": job_id, "updated_at": time.time()}
	tmp = path.with_name(path.name + ".tmp")
	with tmp.open("w", encoding="utf-8") as f:
		json.dump(record, f, indent=2)
	os.replace(tmp, path)


def read_status(job_id: str) -> Dict[str, Any]:
	path = status_path(job_id)
	if not path.exists():
		return {"job_id": job_id, "status": "unknown"}
	with path.open("r", encoding="utf-8") as f:
		return json.load(f)
