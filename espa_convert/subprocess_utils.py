import os
import shlex
import signal
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Union

from espa_convert.logs import STATUS_LOGGER as STATUS_LOG


class CommandError(RuntimeError):
    """
    Custom class to capture subprocess call errors
    """
    pass


def run_command(
    command: Sequence[Union[str, int, Path]],
    work_dir: Union[str, Path],
    timeout: Optional[float] = None,
    command_name: Optional[str] = None,
) -> str:
    """
    Execute an external command through the shell and return its stdout.

    Every argument is shell quoted, so paths with blanks are passed through intact.

    :param command:
        The program followed by its arguments.
    :param work_dir:
        The directory the command is run from.
    :param timeout:
        An optional number of seconds after which the command is killed.
    :param command_name:
        A short name for the command used in error messages.
    :raises CommandError:
        If the command times out or exits with a non-zero return code.
    """
    cmd = " ".join(shlex.quote(str(i)) for i in command)

    proc = subprocess.Popen(
        cmd,
        stderr=subprocess.PIPE,
        stdout=subprocess.PIPE,
        preexec_fn=os.setsid,
        shell=True,
        cwd=str(work_dir),
    )

    timed_out = False

    try:
        stdout, stderr = proc.communicate(timeout=timeout)

    except subprocess.TimeoutExpired:
        os.killpg(os.getpgid(proc.pid), signal.SIGTERM)
        stdout, stderr = proc.communicate()
        timed_out = True

    stdout_decode = stdout.decode("utf-8")
    stderr_decode = stderr.decode("utf-8")

    if timed_out or proc.returncode != 0:
        STATUS_LOG.error(
            f"Command {cmd} has non-zero return code {proc.returncode}",
            command=cmd,
            std_err=stderr_decode,
        )

        if command_name is None:
            command_name = cmd

        if timed_out:
            raise CommandError(f"Command `{command_name}` timed out")
        else:
            raise CommandError(f"Command `{command_name}` has return code: {proc.returncode}")

    return stdout_decode
