# minishell

A small interactive command shell. It reads a line, splits it into a
pipeline of commands, expands variables, strips quotes, sets up
redirections and runs each command either as a builtin or as an external
program found through `PATH`.

## Running

```
minishell
```

The prompt shows the current user (`$USER`, or `unknown`) and the working
directory. The session ends with `exit` or at end of input (Ctrl-D).
Ctrl-C abandons the current line and sets the exit status to 130. On
start the `minishell` command raises `SHLVL` by one, or sets it to 1 when
it is unset. Each non-empty line is added to the `readline` history when
the `readline` module is available.

## What the shell understands

- Pipelines: `ls -l | grep py | wc -l`
- Input and output redirection: `< file`, `> file`, `>> file`
- Here-documents: `cat << END`, which reads lines (prompting with `> ` on
  standard error) until one equals `END` or input ends
- Single quotes, which keep their contents literal
- Double quotes, inside which `$NAME` is still expanded
- `$NAME` for environment variables and `$?` for the last exit status;
  names are made of ASCII letters and digits, and an unset variable
  expands to nothing

Output targets of `>` and `>>` are created while the line is parsed.

A line that starts with `|`, ends with `|`, has a redirection with no
target (or with another redirection as its target), or has an unclosed
quote is rejected with `Error: Invalid syntax` and sets the status to 1.

## Builtins

| Builtin  | Behaviour |
|----------|-----------|
| `echo`   | Prints its arguments separated by spaces; any `-n`, `-nnn`, ... argument drops the final newline |
| `cd`     | Changes directory, to `$HOME` without an argument; updates `PWD` and `OLDPWD` where they are set |
| `pwd`    | Prints the working directory |
| `env`    | Prints every environment entry |
| `export` | Sets `NAME=value` entries; names must start with a letter, arguments without `=` are ignored |
| `unset`  | Removes variables |
| `exit`   | Leaves the shell with an optional numeric status; a non-numeric argument exits with 2 |

A single builtin with no pipe runs inside the shell itself, so `cd` and
`export` change the shell's state. Inside a pipeline a builtin works on a
copy of the environment, and its changes are not kept.

A bare command name is looked up in the directories of `PATH`. An
external command that cannot be found fails with status 127; one that
exists but cannot be executed fails with status 126.

## Using it from Python

```python
from minishell.shell import Shell

shell = Shell({"PATH": "/usr/bin:/bin", "HOME": "/tmp"})
shell.handle_line("export GREETING=hello")
shell.handle_line("echo $GREETING | cat")
print(shell.env.exit_value)
```

`Shell.handle_line` raises `minishell.builtins.ShellExit` when the line
runs `exit`; its `status` attribute holds the exit status.
`Shell.run` takes an optional function that is given the prompt and
returns the next line, or `None` at end of input.

Lower-level pieces:

- `minishell.parser.parse_line` turns a line into a list of
  `minishell.model.Command` objects; it raises
  `minishell.model.ParseError` on invalid syntax.
- `minishell.executor.execute_pipeline` runs such a list against a
  `minishell.environment.Environment` and returns the last status.
- `minishell.words.parse_word`, `expand_variables` and `remove_quotes`
  handle single words.
- `minishell.paths.resolve_command` resolves a command name against
  `PATH`.

## What it does not do

There are no `;`, `&&` or `||` lists, no background jobs or job control,
no backslash escapes, no filename globbing, no subshells and no
scripting (the shell reads interactive lines only). History is not saved
between sessions.