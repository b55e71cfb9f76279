"""Interval scheduler - runs each pipeline job on its own timer."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

JobFunc = Callable[[], Awaitable[Any]]


@dataclass
class Job:
    """A named coroutine run every ``interval`` seconds."""

    name: str
    interval: float
    func: JobFunc
    run_immediately: bool = True
    runs: int = 0
    failures: int = 0


class Scheduler:
    """
    Cooperative timer-driven scheduler.

    Every job runs in its own task: a failed run is logged and the job simply
    waits for its next interval. Jobs never wait on each other.
    """

    def __init__(self):
        self.jobs: dict[str, Job] = {}
        self._tasks: dict[str, asyncio.Task] = {}
        self._running = False

    def add_job(
        self,
        name: str,
        interval: float,
        func: JobFunc,
        run_immediately: bool = True,
    ) -> Job:
        """Register a job; call before start()."""
        if interval <= 0:
            raise ValueError(f"Job {name} needs a positive interval, got {interval}")
        job = Job(name=name, interval=interval, func=func, run_immediately=run_immediately)
        self.jobs[name] = job
        logger.info(f"Scheduled job {name} every {interval:g}s")
        return job

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        """Start one task per job on the running event loop."""
        self._running = True
        for name, job in self.jobs.items():
            self._tasks[name] = asyncio.create_task(self._loop(job), name=f"job:{name}")

    async def stop(self):
        """Cancel all job tasks and wait for them to finish."""
        self._running = False
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()

        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass

        self._tasks.clear()

    async def run_job(self, job: Job) -> bool:
        """Run a job once; return True on success."""
        job.runs += 1
        try:
            await job.func()
            return True
        except asyncio.CancelledError:
            raise
        except Exception as e:
            job.failures += 1
            logger.error(f"Job {job.name} failed: {e}", exc_info=True)
            return False

    async def _loop(self, job: Job):
        if not job.run_immediately:
            await asyncio.sleep(job.interval)

        loop = asyncio.get_running_loop()
        while self._running:
            started = loop.time()
            await self.run_job(job)

            if self._running:
                # Next start is `interval` after this one started, or now if overdue
                delay = max(0.0, job.interval - (loop.time() - started))
                logger.debug(f"Next {job.name} run in {delay:.1f}s")
                await asyncio.sleep(delay)
