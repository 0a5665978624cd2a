import io
import os
import signal
import sys

import pytest

from minishell.builtins import ShellExit
from minishell.environment import Environment
from minishell.executor import execute_pipeline, run_builtin
from minishell.model import Command


def make_env(*extra):
    return Environment([f"PATH={os.environ.get('PATH', '')}", *extra])


def py(code):
    return Command(filename=sys.executable, argv=[sys.executable, "-c", code])


def builtin(*argv):
    return Command(filename=argv[0], argv=list(argv))


def run(commands, env=None, stdin_text=""):
    env = env if env is not None else make_env()
    out, err = io.StringIO(), io.StringIO()
    status = execute_pipeline(commands, env, io.StringIO(stdin_text), out, err)
    return status, out.getvalue(), err.getvalue(), env


def test_run_builtin_echo():
    out = io.StringIO()
    status = run_builtin(builtin("echo", "a", "b"), make_env(), 1, out, io.StringIO())
    assert status == 0
    assert out.getvalue() == "a b\n"


def test_run_builtin_empty_command_succeeds():
    assert run_builtin(Command(), make_env(), 1, io.StringIO(), io.StringIO()) == 0


def test_run_builtin_rejects_other_names():
    with pytest.raises(ValueError):
        run_builtin(builtin("ls"), make_env(), 1, io.StringIO(), io.StringIO())


def test_single_builtin_changes_shell_env():
    status, _, _, env = run([builtin("export", "A=1")])
    assert status == 0
    assert env.lookup("A") == "1"


def test_single_exit_raises():
    with pytest.raises(ShellExit) as info:
        run([builtin("exit", "3")])
    assert info.value.status == 3


def test_builtins_in_pipeline_do_not_touch_shell_env():
    status, out, _, env = run([builtin("export", "A=1"), builtin("echo", "x")])
    assert status == 0
    assert out == "x\n"
    assert env.lookup("A") is None


def test_exit_in_pipeline_gives_status():
    status, _, _, env = run([builtin("echo"), builtin("exit", "5")])
    assert status == 5
    assert env.exit_value == 5


def test_cd_in_pipeline_keeps_cwd(tmp_path):
    before = os.getcwd()
    status, out, _, env = run([builtin("cd", str(tmp_path)), builtin("echo", "x")])
    assert status == 0
    assert out == "x\n"
    assert env.lookup("PWD") != str(tmp_path)
    assert os.getcwd() == before


def test_external_output_captured():
    status, out, _, _ = run([py("print('hi')")])
    assert status == 0
    assert out == "hi\n"


def test_external_exit_status_saved():
    status, _, _, env = run([py("import sys; sys.exit(3)")])
    assert status == 3
    assert env.exit_value == 3


def test_killed_by_signal():
    status, _, _, _ = run([py("import os, signal; os.kill(os.getpid(), signal.SIGTERM)")])
    assert status == 128 + signal.SIGTERM


def test_command_not_found():
    status, _, err, _ = run([Command(filename="nosuchcmd", argv=["nosuchcmd"])])
    assert status == 127
    assert err == "minishell: nosuchcmd: command not found\n"


def test_permission_denied(tmp_path):
    script = tmp_path / "script"
    script.write_text("echo\n")
    script.chmod(0o644)
    status, _, err, _ = run([Command(filename=str(script), argv=[str(script)])])
    assert status == 126
    assert "Permission denied" in err


def test_builtin_piped_into_process():
    code = "import sys; sys.stdout.write(sys.stdin.read().upper())"
    status, out, _, _ = run([builtin("echo", "hello"), py(code)])
    assert status == 0
    assert out == "HELLO\n"


def test_process_piped_into_process():
    code = "import sys; sys.stdout.write(sys.stdin.read()[::-1])"
    status, out, _, _ = run([py("print('abc', end='')"), py(code)])
    assert status == 0
    assert out == "cba"


def test_output_redirect(tmp_path):
    target = tmp_path / "out.txt"
    command = py("print('data')")
    command.redirect_output = str(target)
    status, out, _, _ = run([command])
    assert status == 0
    assert out == ""
    assert target.read_text() == "data\n"


def test_append_redirect(tmp_path):
    target = tmp_path / "log.txt"
    target.write_text("first\n")
    command = py("print('second')")
    command.append_output = str(target)
    run([command])
    assert target.read_text() == "first\nsecond\n"


def test_missing_input_redirect(tmp_path):
    missing = tmp_path / "missing"
    command = py("print('never')")
    command.redirect_input = str(missing)
    status, out, err, _ = run([command])
    assert status == 1
    assert out == ""
    assert err == f"minishell: {missing}: No such file or directory\n"


def test_input_redirect(tmp_path):
    source = tmp_path / "in.txt"
    source.write_text("content")
    command = py("import sys; sys.stdout.write(sys.stdin.read())")
    command.redirect_input = str(source)
    status, out, _, _ = run([command])
    assert status == 0
    assert out == "content"


def test_heredoc_feeds_process():
    command = py("import sys; sys.stdout.write(sys.stdin.read())")
    command.heredoc_delimiter = "EOF"
    status, out, err, _ = run([command], stdin_text="line1\nEOF\nrest\n")
    assert status == 0
    assert out == "line1\n"
    assert err.startswith("> ")


def test_status_is_that_of_last_command():
    status, _, _, _ = run([py("import sys; sys.exit(4)"), Command()])
    assert status == 0


def test_empty_pipeline_keeps_status():
    env = make_env()
    env.exit_value = 9
    assert execute_pipeline([], env, io.StringIO(), io.StringIO(), io.StringIO()) == 9