"""Base classes for metric collection components."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import BaseModel

from ..config.quality_config import QualityGateConfig

logger = logging.getLogger(__name__)


class CommandResult(BaseModel):
    """Captured output of a finished subprocess."""

    command: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return self.stdout + self.stderr


async def run_command(
    cmd: List[str],
    cwd: Optional[Union[str, Path]] = None,
    timeout: float = 60.0,
    merge_stderr: bool = False,
) -> Optional[CommandResult]:
    """
    Run a tool in a subprocess and capture its output.

    PATTERN: asyncio subprocess with a hard timeout
    CRITICAL: A non-zero exit still returns output; callers parse it
    GOTCHA: Missing executables and timeouts yield None, never raise

    Args:
        cmd: Command and arguments
        cwd: Working directory
        timeout: Timeout in seconds
        merge_stderr: Send stderr into stdout (like ``2>&1``)

    Returns:
        CommandResult, or None if the tool could not run to completion
    """
    start = time.perf_counter()

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT if merge_stderr else asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
        )
    except FileNotFoundError:
        logger.warning(f"{cmd[0]} not installed")
        return None
    except OSError as e:
        logger.warning(f"Failed to start {cmd[0]}: {e}")
        return None

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(f"{' '.join(cmd)} timed out after {timeout}s")
        if process.returncode is None:
            process.kill()
        await process.wait()
        return None

    duration_ms = (time.perf_counter() - start) * 1000
    return CommandResult(
        command=list(cmd),
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace") if stdout else "",
        stderr=stderr.decode("utf-8", errors="replace") if stderr else "",
        duration_ms=duration_ms,
    )


class BaseCollector(ABC):
    """
    Abstract base class for metric collectors.

    PATTERN: One external tool or report file per collector
    CRITICAL: collect() returns None when no value can be produced
    GOTCHA: Collectors are independent and may run in any order
    """

    name: str = "collector"

    def __init__(self, config: Optional[QualityGateConfig] = None):
        """
        Initialize collector.

        Args:
            config: Paths and commands; read from the environment when omitted
        """
        self.config = config or QualityGateConfig()
        self.logger = logger

    @abstractmethod
    async def collect(self) -> Optional[Any]:
        """
        Produce the collector's metric value.

        Returns:
            Parsed value, or None when unavailable
        """

    async def _run(self, cmd: List[str], merge_stderr: bool = False) -> Optional[CommandResult]:
        return await run_command(
            cmd,
            cwd=self.config.project_root,
            timeout=self.config.command_timeout,
            merge_stderr=merge_stderr,
        )
