# jobs.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
import logging, threading, time, uuid

from request_context import bind_request_id

log = logging.getLogger("jobs")

def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

@dataclass
class Job:
    id: str
    status: str = "pending"  # pending|running|done|error
    created_at: str = field(default_factory=_now)
    updated_at: str = field(default_factory=_now)
    steps: List[Dict[str, Any]] = field(default_factory=list)  # {'seq', 'ts', 'msg'}
    result: Optional[Any] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

class JobManager:
    """
    Runs content generation in background threads so the route editor can
    poll instead of holding a request open across retries and backoff.
    """

    def __init__(self, max_workers: int = 4):
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()
        self._pool = threading.BoundedSemaphore(max_workers)

    def _progress_for(self, job: Job) -> Callable[[str], None]:
        def progress(msg: str) -> None:
            with self._lock:
                job.steps.append({"seq": len(job.steps) + 1, "ts": _now(), "msg": msg})
                job.updated_at = _now()
        return progress

    def create(self, target: Callable[..., Any], *, args: tuple = (), kwargs: dict | None = None) -> Job:
        kwargs = dict(kwargs or {})
        job = Job(id=uuid.uuid4().hex[:12])
        with self._lock:
            self._jobs[job.id] = job

        progress = self._progress_for(job)

        def runner():
            # contextvars do not cross into new threads; tag this thread's logs with the job id
            bind_request_id(job.id)
            self._pool.acquire()
            try:
                with self._lock:
                    job.status = "running"
                progress("Job started")
                res = target(*args, **{**kwargs, "progress": progress})
                with self._lock:
                    job.result = res
                    job.status = "done"
                    job.updated_at = _now()
                progress("Job finished")
            except Exception as e:
                log.exception("Job %s failed", job.id)
                with self._lock:
                    job.error = str(e)
                    job.error_type = type(e).__name__
                    job.status = "error"
                    job.updated_at = _now()
                progress(f"Error: {e}")
            finally:
                self._pool.release()

        threading.Thread(target=runner, name=f"job-{job.id}", daemon=True).start()
        return job

    def get(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._jobs.get(job_id)

    def wait(self, job_id: str, timeout_s: float = 10.0, poll_s: float = 0.01) -> Optional[Job]:
        """Block until the job leaves pending/running or the timeout passes."""
        deadline = time.monotonic() + timeout_s
        while time.monotonic() < deadline:
            job = self.get(job_id)
            if job is None or job.status in ("done", "error"):
                return job
            time.sleep(poll_s)
        return self.get(job_id)

    def prune(self, older_than_seconds: int = 3600) -> int:
        cutoff = time.time() - older_than_seconds
        with self._lock:
            stale = [
                jid for jid, job in self._jobs.items()
                if job.status in ("done", "error")
                and datetime.fromisoformat(job.updated_at).timestamp() < cutoff
            ]
            for jid in stale:
                self._jobs.pop(jid, None)
        return len(stale)

manager = JobManager()
