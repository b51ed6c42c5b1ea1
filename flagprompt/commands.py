"""
flagprompt command layer: build, compose, and run CLI commands.

What this module provides
- Command: a node of a command tree that owns options, a pre-run pipeline and
  a callback.
  • Options are declared with option() (local) or persistent() (inherited by
    every descendant) and looked up with flag(name).
  • Required options are declared with require(); missing ones are prompted
    for on the command's streams right before the callback runs.
  • Hierarchies (parent/child) model subcommands; the root owns the tree's
    requirements registry.
- Factories and helpers:
  • command(...): create a Command or a decorator that produces one.
  • invoke(obj, prompt): convenience runner for Commands or plain callables.

Quick start
    from flagprompt import command, invoke

    @command
    def deploy(command, args):
        print(command.get("region"), command.get("zones"))

    deploy.option("region", "r", usage="cloud region to deploy to")
    deploy.option("zones", usage="availability zones", multiple=True)
    deploy.require("region")
    deploy.require("zones")

    if __name__ == "__main__":
        invoke(deploy)   # asks for --region and --zones when they are missing

Parsing rules
- --name=value, --name value, -n value, -n=value and -nvalue.
- A bare --name assigns the option's implicit value (booleans: "true") or,
  without one, consumes the next token.
- The first positional token routes to a child command when there are children
  and no positional argument was seen yet; '--' ends option parsing.
- -h/--help renders help (unless the command defines those names) and stops.

Runtime flags
- shell: render faults on stderr and exit(1) instead of raising them.
- colorful / fancy: styling of rendered faults and help.
- stdin / stdout: prompt streams; inherited from the parent, falling back to
  sys.stdin / sys.stdout at the time they are used.
"""
import functools
import inspect
import operator
import os.path
import re
import shlex
import sys
from collections import deque
from collections.abc import Iterable

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import hooks
from .arguments import Option
from .faults import *
from .logging import get_logger
from .requirements import Requirements, declare_required, declare_inherited_required
from .utils import *

logger = get_logger(__name__)


class CommandType(type):
    """
    Metaclass providing stable __repr__/__rich_repr__ and read-only mirrored
    properties for every name listed in __introspectable__.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _attach_to_parent(self, parent):
    """
    Register this command under its parent, enforcing unique names.
    """
    if parent is None or parent._children.setdefault(name := self.name, self) is self:
        return

    typeof = "subcommand" if parent.parent else "command"
    raise ValueError(f"{type(self).__typename__} {typeof} name {name!r} is already in use")


class Command(metaclass=CommandType):
    """
    Command tree node with options, a pre-run pipeline and a callback.

    Lifecycle
    - Constructed from a callback callback(command, args) (or without one for
      pure grouping commands) and optionally attached to a parent.
    - Options and requirements are declared after construction.
    - __invoke__(prompt) parses tokens, routes to subcommands, runs the pre-run
      pipeline (caller hooks, then the missing-option resolver) and finally
      the callback.
    """

    __introspectable__ = (
        "name",
        "descr",
        "usage",
        "parent",
        "children",
        "shell",
        "colorful",
        "fancy",
    )

    __displayable__ = (
        "name",
        "descr",
        "parent",
        "children",
        "shell",
    )

    def __init__(
            self,
            callback=Unset,
            /,
            parent=Unset,
            name=Unset,
            usage=Unset,
            descr=Unset,
            *,
            stdin=Unset,
            stdout=Unset,
            shell=Unset,
            colorful=Unset,
            fancy=Unset,
    ):
        """
        Parameters
        - callback: Unset | Callable[[Command, list[str]], Any]
          Body of the command. Unset for commands that only group children.
        - parent: Unset | Command
          Parent under which to attach this command.
        - name: Unset | str
          Defaults to the callback's __name__ (or the program's file name).
        - usage, descr: Unset | str
          Help scalars; descr defaults to the callback's docstring.
        - stdin, stdout: Unset | text stream
          Prompt streams, inherited from the parent when Unset.
        - shell, colorful, fancy: Unset | bool
          Runtime flags, inherited from the parent (or False) when Unset.

        Raises
        - TypeError: wrong parent/callback/name types.
        - ValueError: empty name or a name already used by a sibling.
        """
        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{type(self).__typename__} 'parent' must be a command")
        if callback is not Unset and not callable(callback):
            raise TypeError(f"{type(self).__typename__} 'callback' must be callable")

        name = coalesce(name, getattr(callback, "__name__", os.path.basename(sys.argv[0])))
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{type(self).__typename__} 'name' cannot be empty")

        parent = coalesce(parent)
        self._callback = callback
        self._name = name
        self._usage = coalesce(usage)
        self._descr = coalesce(descr, (inspect.getdoc(callback) or None) if callback is not Unset else None)
        self._parent = parent
        self._children = {}
        self._stdin = coalesce(stdin)
        self._stdout = coalesce(stdout)
        # Runtime flags (inherit from parent when Unset)
        self._shell = bool(coalesce(shell, getattr(parent, "shell", False)))
        self._colorful = bool(coalesce(colorful, getattr(parent, "colorful", False)))
        self._fancy = bool(coalesce(fancy, getattr(parent, "fancy", False)))
        self._options = {}
        self._shorthands = {}
        self._pipeline = hooks.Pipeline()
        self._requirements = Requirements() if parent is None else None
        _attach_to_parent(self, parent)

    @property
    def root(self):
        """
        Return the topmost command in the current command hierarchy.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the full ancestry from root to this command as a tuple.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def requirements(self):
        """
        The Requirements registry shared by the whole tree (owned by the root).
        """
        return self.root._requirements

    @property
    def stdin(self):
        if self._stdin is not None:
            return self._stdin
        return self._parent.stdin if self._parent else sys.stdin

    @stdin.setter
    def stdin(self, stream):
        self._stdin = stream

    @property
    def stdout(self):
        if self._stdout is not None:
            return self._stdout
        return self._parent.stdout if self._parent else sys.stdout

    @stdout.setter
    def stdout(self, stream):
        self._stdout = stream

    # ── Options ────────────────────────────────────────────────────────────

    def _register(self, option):
        if option.name in self._options:
            raise ValueError(f"{type(self).__typename__} option name {option.name!r} is already in use")
        if option.shorthand and option.shorthand in self._shorthands:
            raise ValueError(f"{type(self).__typename__} option shorthand {option.shorthand!r} is already in use")
        self._options[option.name] = option
        if option.shorthand:
            self._shorthands[option.shorthand] = option
        return option

    def option(self, *args, **kwargs):
        """
        Declare a local option; arguments are forwarded to Option(...).

        Returns
        - The new Option, so callers can keep a handle on its value cell.
        """
        return self._register(Option(*args, **kwargs))

    def persistent(self, *args, **kwargs):
        """
        Declare an option inherited by this command and all its descendants.
        """
        return self._register(Option(*args, persistent=True, **kwargs))

    def flag(self, name, /):
        """
        Look up an option by long name: local options first, then persistent
        options of this command and its ancestors (nearest first).

        Returns
        - Option, or None when no such option is visible from this command.
        """
        if (option := self._options.get(name)) is not None:
            return option
        command = self.parent
        while command:
            if (option := command._options.get(name)) is not None and option.persistent:
                return option
            command = command.parent
        return None

    def _shorthand(self, letter):
        if (option := self._shorthands.get(letter)) is not None:
            return option
        command = self.parent
        while command:
            if (option := command._shorthands.get(letter)) is not None and option.persistent:
                return option
            command = command.parent
        return None

    @property
    def options(self):
        """
        Every option visible from this command: local ones, then inherited ones.
        """
        options = dict(self._options)
        for command in reversed(self.path[:-1]):
            for name, option in command._options.items():
                if option.persistent:
                    options.setdefault(name, option)
        return options

    def get(self, name, /):
        """
        Return the Python value of option 'name'.

        Raises
        - NoSuchOptionError: no such option is visible from this command.
        """
        if (option := self.flag(name)) is None:
            raise NoSuchOptionError(
                "no such flag --%s on command %r" % (name, self.name),
                title="no such option",
                code=FaultCode.NO_SUCH_OPTION,
                tool=self,
            )
        return option.get()

    # ── Requirements and hooks ─────────────────────────────────────────────

    def require(self, name, /, *, inherited=False):
        """
        Declare option 'name' required; see flagprompt.requirements.
        """
        if inherited:
            declare_inherited_required(self, name)
        else:
            declare_required(self, name)

    def prerun(self, hook=Unset, /, *, persistent=False):
        """
        Attach a caller hook hook(command, args) run before the callback.

        Hooks always run before the missing-option resolver. Usable directly
        (cmd.prerun(fn)) or as a decorator (@cmd.prerun or @cmd.prerun(persistent=True)).
        """
        @rename("prerun")
        def wrapper(hook, /):
            return self._pipeline.attach(hook, persistent=persistent)

        return wrapper(hook) if hook is not Unset else wrapper

    def command(self, source=Unset, /, *args, **kwargs):
        """
        Create a subcommand under this command (direct or decorator mode).
        """
        return command(source, self, *args, **kwargs)

    # ── Faults ─────────────────────────────────────────────────────────────

    def trigger(self, fault, /):
        """
        Surface a fault: raise it, or print it and exit(1) in shell mode.
        """
        if not isinstance(fault, FlagException):
            raise TypeError("trigger() argument must be a flag exception")
        fault = fault.__replace__(tool=self, colorful=self.colorful, fancy=self.fancy)
        if self.shell:
            fault.__trigger__()
        raise fault

    # ── Help ───────────────────────────────────────────────────────────────

    def _helper(self):
        """
        Render help for this command on its output stream.
        """
        console = Console(file=self.stdout, color_system="auto" if self.colorful else None, highlight=False)
        route = " ".join(step.name for step in self.path)
        required = {entry.name for entry in self.requirements}

        renders = [Text.assemble(
            ("usage: ", "bold" if self.colorful else ""),
            self.usage or route + (" [command]" if self.children else "") + " [flags]",
        )]
        if self.descr:
            renders.append(Text(self.descr))

        if self.children:
            table = Table(show_header=False, box=None, padding=(0, 2))
            for child in self.children.values():
                table.add_row(child.name, (child.descr or "").splitlines()[0] if child.descr else "")
            renders.append(Text("commands:"))
            renders.append(table)

        table = Table(show_header=False, box=None, padding=(0, 2))
        for option in self.options.values():
            if option.hidden:
                continue
            names = ("-%s, " % option.shorthand if option.shorthand else "    ") + "--" + option.name
            if option.implicit is None:
                names += " " + option.value.typename
            details = option.usage
            if option.defstr and option.defstr not in ("false", "[]"):
                details += " (default %s)" % option.defstr
            if option.name in required:
                details += " (required)"
            table.add_row(names, details)
        table.add_row("-h, --help", "show this help message and exit")
        renders.append(Text("flags:"))
        renders.append(table)

        if self.fancy:
            console.print(Panel(Group(*renders[1:]), title=renders[0], title_align="left"))
        else:
            console.print(Group(*renders))

    # ── Parsing ────────────────────────────────────────────────────────────

    def _parse_switch(self, token, tokens):
        """
        Parse one switch token, consuming its value from 'tokens' when spaced.

        Returns
        - True when the token asked for help, False otherwise.
        """
        if token.startswith("--"):
            name, separator, value = token[2:].partition("=")
            option = self.flag(name)
            input = "--" + name
        else:
            letters, separator, value = token[1:].partition("=")
            if len(letters) > 1 and not separator:
                letters, separator, value = letters[0], "=", letters[1:]
            option = self._shorthand(letters)
            input = "-" + letters

        if option is None:
            if input in ("-h", "--help"):
                return True
            self.trigger(UnknownSwitchError(
                "unknown flag %r" % input,
                title="unknown switch",
                code=FaultCode.UNKNOWN_SWITCH,
                input=input,
                hint="run '%s --help' to see available flags" % " ".join(step.name for step in self.path),
            ))

        if separator:
            text = value
        elif option.implicit is not None:
            text = option.implicit
        elif tokens:
            text = tokens.popleft()
        else:
            self.trigger(OptionValueRequiredError(
                "flag %r needs an argument" % input,
                title="option value required",
                code=FaultCode.OPTION_VALUE_REQUIRED,
                input=input,
                option=option,
                hint="use %s=<value> or %s <value>" % (input, input),
            ))

        try:
            option.set(text)
        except InvalidValueError as exception:
            self.trigger(exception)
        return False

    def _parseargs(self, tokens):
        """
        Parse argv-like tokens, route to subcommands, then dispatch.

        phases
        - loop: switches are parsed into their options; the first positional
          token may route to a child (which continues with the remaining tokens).
        - pre-run: hooks.run(self, args) runs caller hooks and the resolver.
        - run: callback(self, args).
        """
        args = []
        while tokens:
            token = tokens.popleft()

            if token == "--":
                args.extend(tokens)
                tokens.clear()
            elif token.startswith("-") and token != "-":
                if self._parse_switch(token, tokens):
                    self._helper()
                    return
            elif self.children and not args:
                try:
                    child = self.children[token]
                except KeyError:
                    route = " ".join(step.name for step in self.path)
                    self.trigger(UnknownCommandError(
                        "unknown %s %r for %r" % ("subcommand" if self.parent else "command", token, route),
                        title="unknown command",
                        code=FaultCode.UNKNOWN_COMMAND,
                        input=token,
                        hint="run '%s --help' to see available commands" % route,
                    ))
                return child._parseargs(tokens)
            else:
                args.append(token)

        try:
            hooks.run(self, args)
        except FlagException as exception:
            self.trigger(exception)

        if self._callback is not Unset:
            self._callback(self, args)

    def __invoke__(self, prompt=Unset):
        """
        Execute this command with a token stream.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; will be split via shlex.split.
          • Iterable[str]: pre-tokenized sequence.

        Raises
        - TypeError: when prompt is not Unset/str/Iterable[str].
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError(f"__invoke__() argument must be a string or an iterable of strings")
        else:
            raise TypeError(f"__invoke__() argument must be a string or an iterable of strings")

        logger.debug("command_invoked", command=self.name, tokens=len(tokens))
        self._parseargs(deque(tokens))


def command(source=Unset, /, *args, **kwargs):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct callback:   cmd = command(func, parent, name="x")
    - Decorator:         @command  /  @command(name="x", shell=True)

    Parameters
    - source: Unset | Callable
      When Unset, a decorator is returned. Otherwise a Command is created.
    - *args, **kwargs: forwarded to Command(...).
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return Command(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for commands or callables.

    Behavior
    - If 'object' implements __invoke__, call it with prompt.
    - If 'object' is a plain callable, wrap it as a Command and then invoke.
    - Otherwise, raise TypeError.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        object.__invoke__(prompt)
        return

    if callable(object):
        return invoke(command(object), prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Command",
    "command",
    "invoke",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del CommandType
