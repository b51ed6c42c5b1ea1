"""
flagprompt required-option registry.

Scope
- RequiredOption: one declaration, (name, owner). owner is the declaring
  Command, or None for an inherited requirement. The resolver looks every
  name up on the command being dispatched, whoever declared it.
- Requirements: the resolver context owned by the root of a command tree.
  • entries: declarations in call order, both kinds interleaved; this is the
    prompting order.
  • call-once guard: remembers which command instances were already resolved,
    behind one re-entrant lock.
- declare_required / declare_inherited_required: the two declaration calls.

Notes
- Registries are per tree, so two independent trees in one process (tests)
  never share requirements or guards.
- Duplicate declarations are accepted and prompt twice.
"""
import threading
import weakref
from typing import NamedTuple

from .faults import FaultCode, NoSuchOptionError
from .hooks import install
from .logging import get_logger

logger = get_logger(__name__)


class RequiredOption(NamedTuple):
    name: str
    owner: object = None

    @property
    def inherited(self):
        return self.owner is None


class Requirements:
    """
    Ordered, append-only record of required options plus the call-once guard.

    Attributes
    - lock: threading.RLock held by the resolver for its check-run-mark sequence.
    """

    def __init__(self):
        self._entries = []
        self._resolved = weakref.WeakKeyDictionary()
        self.lock = threading.RLock()

    def __iter__(self):
        return iter(tuple(self._entries))

    def __len__(self):
        return len(self._entries)

    def __repr__(self):
        return f"requirements({[entry.name for entry in self._entries]!r})"

    def append(self, entry, /):
        if not isinstance(entry, RequiredOption):
            raise TypeError("append() argument must be a required option")
        self._entries.append(entry)

    def resolved(self, command, /):
        with self.lock:
            return self._resolved.get(command, False)

    def mark(self, command, /):
        with self.lock:
            self._resolved[command] = True


def _lookup(command, name):
    if (option := command.flag(name)) is None:
        raise NoSuchOptionError(
            "no such flag --%s on command %r" % (name, command.name),
            title="no such option",
            code=FaultCode.NO_SUCH_OPTION,
            tool=command,
            hint="declare the option with command.option(%r, ...) before requiring it" % name,
        )
    return option


def declare_required(command, name, /):
    """
    Require option 'name' of 'command': prompt for it when it is missing.

    Raises
    - NoSuchOptionError: the command (and its ancestors' persistent options)
      has no option called 'name'.
    """
    _lookup(command, name)
    install(command)
    command.requirements.append(RequiredOption(name, command))
    logger.debug("requirement_declared", command=command.name, option=name, inherited=False)


def declare_inherited_required(command, name, /):
    """
    Require option 'name' on 'command' and on every descendant that has it.

    The resolver is installed as a persistent stage, so it also runs when a
    subcommand is dispatched.

    Raises
    - NoSuchOptionError: the command has no option called 'name'.
    """
    _lookup(command, name)
    install(command, persistent=True)
    command.requirements.append(RequiredOption(name))
    logger.debug("requirement_declared", command=command.name, option=name, inherited=True)


__all__ = (
    "RequiredOption",
    "Requirements",
    "declare_required",
    "declare_inherited_required",
)
