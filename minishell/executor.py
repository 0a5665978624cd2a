"""Running parsed pipelines: builtins in the shell, other commands as processes."""

from __future__ import annotations

import io
import os
import signal
import subprocess
import sys
import tempfile
import threading
from collections.abc import Callable, Iterable
from typing import TextIO

from .builtins import (
    ShellExit,
    builtin_cd,
    builtin_echo,
    builtin_env,
    builtin_exit,
    builtin_export,
    builtin_pwd,
    builtin_unset,
)
from .environment import Environment
from .heredoc import read_heredoc
from .model import Command, is_builtin
from .paths import is_relative_or_absolute

NO_EXEC_PERMISSION = 126
CMD_NOT_FOUND = 127
_BROKEN_PIPE_STATUS = 128 + getattr(signal, "SIGPIPE", 13)

Waiter = Callable[[], int]


class _RedirectError(Exception):
    """A redirection target could not be opened."""


def run_builtin(
    command: Command,
    env: Environment,
    ncommands: int = 1,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run a builtin command and return its status.

    A command without a name does nothing and succeeds. ShellExit raised
    by "exit" is left to the caller.
    """
    if out is None:
        out = sys.stdout
    if err is None:
        err = sys.stderr
    if command.filename is None and not command.argv:
        return 0
    name = command.argv[0]
    match name:
        case "cd":
            return builtin_cd(command, env, err)
        case "echo":
            return builtin_echo(command, out)
        case "pwd":
            return builtin_pwd(out, err)
        case "env":
            return builtin_env(env, out)
        case "export":
            return builtin_export(env, command, err)
        case "unset":
            return builtin_unset(env, command)
        case "exit":
            return builtin_exit(command, ncommands, err)
    raise ValueError(f"not a builtin: {name}")


def _fileno(stream: object) -> int | None:
    try:
        return stream.fileno()  # type: ignore[attr-defined]
    except (AttributeError, OSError, ValueError):
        return None


def _status(returncode: int) -> int:
    return 128 - returncode if returncode < 0 else returncode


def _restore_sigquit() -> None:
    signal.signal(signal.SIGQUIT, signal.SIG_DFL)


def _preexec() -> Callable[[], None] | None:
    if not hasattr(signal, "SIGQUIT"):
        return None
    if signal.getsignal(signal.SIGQUIT) is signal.SIG_IGN:
        return _restore_sigquit
    return None


def _open_input(
    command: Command, pipe_in: int | None, stdin: TextIO, err: TextIO
) -> tuple[int | None, bool]:
    if command.heredoc_delimiter is not None:
        body = read_heredoc(command.heredoc_delimiter, stdin, err)
        with tempfile.TemporaryFile() as tmp:
            tmp.write(body.encode())
            tmp.flush()
            tmp.seek(0)
            return os.dup(tmp.fileno()), True
    if command.redirect_input is not None:
        try:
            return os.open(command.redirect_input, os.O_RDONLY), True
        except OSError:
            err.write(
                f"minishell: {command.redirect_input}: No such file or directory\n"
            )
            raise _RedirectError from None
    return pipe_in, False


def _open_output(
    command: Command, pipe_out: int | None, err: TextIO
) -> tuple[int | None, bool]:
    if command.redirect_output is not None and command.append_output is None:
        path = command.redirect_output
        flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
    elif command.append_output is not None:
        path = command.append_output
        flags = os.O_WRONLY | os.O_CREAT | os.O_APPEND
    else:
        return pipe_out, False
    try:
        return os.open(path, flags, 0o644), True
    except OSError:
        err.write(f"minishell: {path}: No such file or directory\n")
        raise _RedirectError from None


def _launch_builtin(
    command: Command,
    env: Environment,
    ncommands: int,
    out_fd: int | None,
    stdout: TextIO,
    stderr: TextIO,
) -> Waiter:
    child_env = Environment(env.entries)
    child_env.exit_value = env.exit_value
    if out_fd is None:
        stream, owned = stdout, False
    else:
        stream, owned = os.fdopen(os.dup(out_fd), "w"), True
    result = [0]

    def target() -> None:
        try:
            result[0] = run_builtin(command, child_env, ncommands, stream, stderr)
        except ShellExit as exc:
            result[0] = exc.status
        except BrokenPipeError:
            result[0] = _BROKEN_PIPE_STATUS
        finally:
            try:
                if owned:
                    stream.close()
                else:
                    stream.flush()
            except OSError:
                result[0] = _BROKEN_PIPE_STATUS

    thread = threading.Thread(target=target, daemon=True)
    thread.start()

    def wait() -> int:
        thread.join()
        return result[0]

    return wait


def _launch_external(
    command: Command,
    env: Environment,
    in_fd: int | None,
    out_fd: int | None,
    streams: tuple[TextIO, TextIO, TextIO],
    cwd: str | None,
) -> Waiter:
    stdin, stdout, stderr = streams
    filename = command.filename or ""
    name = command.argv[0] if command.argv else filename
    runnable = os.access(filename, os.F_OK) and (
        is_relative_or_absolute(filename) or not env.contains("PATH")
    )
    if not runnable:
        stderr.write(f"minishell: {name}: command not found\n")
        return lambda: CMD_NOT_FOUND
    if not os.access(filename, os.X_OK):
        stderr.write(f"minishell: {name}: Permission denied\n")
        return lambda: NO_EXEC_PERMISSION

    stdin_arg = in_fd if in_fd is not None else _fileno(stdin)
    capture = False
    stdout_arg: int | None
    if out_fd is not None:
        stdout_arg = out_fd
    else:
        stdout_arg = _fileno(stdout)
        if stdout_arg is None:
            stdout_arg = subprocess.PIPE
            capture = True
        else:
            stdout.flush()
    stderr_arg = _fileno(stderr)
    if stderr_arg is not None:
        stderr.flush()
    try:
        proc = subprocess.Popen(
            command.argv,
            executable=filename,
            stdin=stdin_arg,
            stdout=stdout_arg,
            stderr=stderr_arg,
            env=env.as_dict(),
            cwd=cwd,
            preexec_fn=_preexec(),
        )
    except OSError:
        return lambda: 1

    pump: threading.Thread | None = None
    if capture and proc.stdout is not None:
        text = io.TextIOWrapper(proc.stdout, errors="replace")

        def copy() -> None:
            for chunk in iter(lambda: text.read(4096), ""):
                stdout.write(chunk)
            text.close()

        pump = threading.Thread(target=copy, daemon=True)
        pump.start()

    def wait() -> int:
        returncode = proc.wait()
        if pump is not None:
            pump.join()
        return _status(returncode)

    return wait


def _launch(
    command: Command,
    env: Environment,
    ncommands: int,
    pipe_in: int | None,
    pipe_out: int | None,
    streams: tuple[TextIO, TextIO, TextIO],
    cwd: str | None,
) -> Waiter:
    stdin, stdout, stderr = streams
    if command.filename is None:
        return lambda: 0
    try:
        in_fd, in_owned = _open_input(command, pipe_in, stdin, stderr)
    except _RedirectError:
        return lambda: 1
    try:
        out_fd, out_owned = _open_output(command, pipe_out, stderr)
    except _RedirectError:
        if in_owned and in_fd is not None:
            os.close(in_fd)
        return lambda: 1
    try:
        if is_builtin(command.filename):
            return _launch_builtin(command, env, ncommands, out_fd, stdout, stderr)
        return _launch_external(command, env, in_fd, out_fd, streams, cwd)
    finally:
        if in_owned and in_fd is not None:
            os.close(in_fd)
        if out_owned and out_fd is not None:
            os.close(out_fd)


def _current_dir() -> str | None:
    try:
        return os.getcwd()
    except OSError:
        return None


def execute_pipeline(
    commands: Iterable[Command],
    env: Environment,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Run *commands* as a pipeline and record the last one's status.

    A lone builtin runs in the shell itself and can change its state;
    every other command runs apart, so builtins inside a longer pipeline
    leave the shell untouched.
    """
    if stdin is None:
        stdin = sys.stdin
    if stdout is None:
        stdout = sys.stdout
    if stderr is None:
        stderr = sys.stderr
    commands = list(commands)
    if not commands:
        return env.exit_value
    if len(commands) == 1 and is_builtin(commands[0].filename):
        status = run_builtin(commands[0], env, 1, stdout, stderr)
        env.exit_value = status
        return status

    cwd = _current_dir()
    streams = (stdin, stdout, stderr)
    waiters: list[Waiter] = []
    prev_read: int | None = None
    try:
        for index, command in enumerate(commands):
            if index + 1 < len(commands):
                next_read, write_end = os.pipe()
            else:
                next_read, write_end = None, None
            try:
                waiters.append(
                    _launch(command, env, len(commands), prev_read, write_end,
                            streams, cwd)
                )
            finally:
                if prev_read is not None:
                    os.close(prev_read)
                if write_end is not None:
                    os.close(write_end)
            prev_read = next_read
    finally:
        if prev_read is not None:
            os.close(prev_read)

    statuses = [wait() for wait in waiters]
    if cwd is not None and _current_dir() != cwd:
        os.chdir(cwd)
    status = statuses[-1]
    env.exit_value = status
    return status