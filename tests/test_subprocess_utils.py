import pytest

from tests.fixtures import *

from espa_convert.subprocess_utils import CommandError, run_command


def test_run_command_returns_stdout(temp_out_dir):
    assert run_command(["echo", "hello world"], temp_out_dir) == "hello world\n"


def test_run_command_in_work_dir(temp_out_dir):
    (temp_out_dir / "band 1.img").touch()

    assert run_command(["ls", "band 1.img"], temp_out_dir).strip() == "band 1.img"


def test_run_command_quotes_arguments(temp_out_dir):
    # shell syntax in arguments is passed through literally
    assert run_command(["echo", "$HOME; false"], temp_out_dir) == "$HOME; false\n"


def test_run_command_failure(temp_out_dir):
    with pytest.raises(CommandError, match="return code: 1"):
        run_command(["false"], temp_out_dir)


def test_run_command_failure_uses_command_name(temp_out_dir):
    with pytest.raises(CommandError, match="`listing`"):
        run_command(["ls", "missing.img"], temp_out_dir, command_name="listing")


def test_run_command_timeout(temp_out_dir):
    with pytest.raises(CommandError, match="timed out"):
        run_command(["sleep", 10], temp_out_dir, timeout=0.5)
