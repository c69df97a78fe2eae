"""Async command execution utilities."""

import asyncio
import logging
from typing import Tuple

DEFAULT_TIMEOUT = 30

_logging = logging.getLogger(__name__)


async def run_command_async(
    command: str, timeout: int = DEFAULT_TIMEOUT
) -> Tuple[str, int]:
    """Run a shell command and return its output and return code.

    stdout is returned when present, stderr otherwise, so failures carry the
    tool's own message. Timeouts and spawn failures are reported as
    return code 1 rather than raised.
    """
    process = None
    try:
        _logging.debug(f"Running command: {command}")
        process = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            _ = await process.wait()
            _logging.error(f"Command timed out after {timeout} seconds: {command}")
            return f"Command timed out after {timeout} seconds", 1

        output = stdout.decode(errors="replace").strip()
        error_output = stderr.decode(errors="replace").strip()
        if error_output:
            _logging.debug(f"stderr: {error_output}")
        returncode = process.returncode if process.returncode is not None else 1
        if returncode != 0 and not output:
            output = error_output
        return output, returncode
    except OSError as e:
        _logging.error(f"Command execution failed: {type(e).__name__}: {e} | Command: {command}")
        return f"Error: {str(e)}", 1
    finally:
        if process:
            transport = getattr(process, "_transport", None)
            if transport:
                transport.close()
