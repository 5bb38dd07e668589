from __future__ import annotations

import logging
import threading
from typing import Any, Dict

from photoresize.services.run_config import RunConfig
from photoresize.services.status_store import write_status
from photoresize.services.walker import walk_tree

logger = logging.getLogger(__name__)

# One walk at a time: jobs queue behind this lock instead of converting in parallel.
_RUN_LOCK = threading.Lock()


def _job_info(config: RunConfig) -> Dict[str, Any]:
	return {
		"source": str(config.source_root),
		"output": str(config.dest_root),
		"resolution": config.resolution,
		"type": config.output_type,
	}


def run_pipeline(job_id: str, config: RunConfig) -> None:
	info = _job_info(config)
	with _RUN_LOCK:
		try:
			write_status(job_id, {**info, "status": "running", "step": "Convert Images"})
			config.dest_root.mkdir(parents=True, exist_ok=True)
			summary = walk_tree(config, echo=False)
			write_status(job_id, {**info, "status": "completed", "step": "Done", "summary": summary.as_dict()})
		except Exception as e:
			logger.exception("[job] %s failed", job_id)
			write_status(job_id, {**info, "status": "error", "error": str(e)})
