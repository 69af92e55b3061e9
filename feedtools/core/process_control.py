"""
Starting and stopping external processes by name or path.

Everything the orchestrator does to OS processes goes through the
`ProcessControl` protocol, so the name-based implementation below can be
replaced by a handle-based one without touching the restart sequence.
"""

import asyncio
import logging
import os
import subprocess
from contextlib import suppress
from pathlib import Path
from typing import Protocol

log = logging.getLogger(__name__)


class ProcessControl(Protocol):
    async def kill(self, image_name: str) -> bool:
        """Force-terminates every process with this image name."""

    async def launch(self, executable: Path) -> bool:
        """Starts an executable without waiting for it to exit."""


class SystemProcessControl:
    """Uses `taskkill` on Windows and `pkill` elsewhere."""

    def __init__(self, kill_timeout: float = 10):
        self.kill_timeout = kill_timeout
        # Detached children stay referenced so Popen can reap them once they exit.
        self.launched: list[subprocess.Popen] = []

    @staticmethod
    def _kill_command(image_name: str) -> list[str]:
        if os.name == "nt":
            return ["taskkill", "/F", "/IM", image_name]
        return ["pkill", "-x", Path(image_name).stem]

    async def kill(self, image_name: str) -> bool:
        """
        Returns True if the kill command reported success. A process that is not
        running is not an error; it simply yields False.
        """
        cmd = self._kill_command(image_name)
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            log.debug(f"Could not run {cmd[0]} for '{image_name}': {e}")
            return False

        try:
            await asyncio.wait_for(proc.communicate(), timeout=self.kill_timeout)
        except asyncio.TimeoutError:
            log.debug(f"{cmd[0]} for '{image_name}' timed out; stopping it.")
            with suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            return False

        if proc.returncode != 0:
            log.debug(f"No running process named '{image_name}' was terminated.")
            return False
        log.debug(f"Terminated '{image_name}'.")
        return True

    async def launch(self, executable: Path) -> bool:
        kwargs = {
            "stdin": subprocess.DEVNULL,
            "stdout": subprocess.DEVNULL,
            "stderr": subprocess.DEVNULL,
            "cwd": str(executable.parent),
        }
        if os.name == "nt":
            kwargs["creationflags"] = (
                subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
            )
        else:
            kwargs["start_new_session"] = True

        self._reap_finished()
        try:
            proc = await asyncio.to_thread(subprocess.Popen, [str(executable)], **kwargs)
        except OSError as e:
            log.debug(f"Failed to launch '{executable}': {e}")
            return False
        self.launched.append(proc)
        log.debug(f"Launched '{executable}' (pid {proc.pid}).")
        return True

    def _reap_finished(self) -> None:
        self.launched = [proc for proc in self.launched if proc.poll() is None]
