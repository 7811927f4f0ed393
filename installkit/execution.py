"""Async command execution utilities."""

import asyncio
import logging

DEFAULT_TIMEOUT = 30
CHECK_TIMEOUT = 120

_logging = logging.getLogger(__name__)


async def run_command_async(
    command: str, timeout: int = DEFAULT_TIMEOUT
) -> tuple[str, int]:
    """Run a command asynchronously and return combined output and return code."""
    process = None
    try:
        _logging.debug(f"Running command: {command}")
        process = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
            output = stdout.decode(errors="replace").strip()
            return output, process.returncode if process.returncode is not None else 1
        except asyncio.TimeoutError:
            process.kill()
            _ = await process.wait()
            _logging.error(f"Command timed out after {timeout} seconds: {command}")
            return f"Command timed out after {timeout} seconds", 1
    except OSError as e:
        _logging.error(f"Command execution failed: {type(e).__name__}: {e} | Command: {command}")
        return f"Error: {str(e)}", 1
    finally:
        if process:
            transport = getattr(process, "_transport", None)
            if transport:
                transport.close()


def run_command(command: str, timeout: int = DEFAULT_TIMEOUT) -> tuple[str, int]:
    """Blocking wrapper around run_command_async."""
    return asyncio.run(run_command_async(command, timeout=timeout))
