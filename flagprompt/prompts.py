"""
flagprompt prompt engine: ask for required options the user did not supply.

What this module provides
- resolve(command, args, stdin, stdout): walk the command tree's requirements
  in declaration order and prompt for every applicable option that still needs
  a value. Runs at most once per command instance.
- prompt(option, stdin, stdout): run the scalar or list protocol for one option.
- needs_prompt(option): the decision rule used by resolve().

Protocol texts
- Every line written to stdout is one of the module constants below (plus the
  "Invalid value: ..." line for rejected input), so callers can rely on them.

Retry bound
- MAX_RETRIES counts rejected values (parse or append failures) per option.
  The protocol aborts with RetriesExceededError once the counter exceeds it,
  that is on the sixth rejected value. Empty lines never count.

End of input
- A stream that has no more lines ends a list that already has elements.
  Anywhere else it raises EndOfInputError: nothing more can be read.
"""
from .faults import *
from .logging import get_logger
from .utils import *
from .values import ScalarValue, ListValue

logger = get_logger(__name__)

MAX_RETRIES = 5

REQUIRED = "Flag --%s is required. Please enter a value for this flag."
USAGE = "Usage: %s"
LIST = "This flag is a list. Each line you type will be one element in the list. To terminate the list, press Enter."
EMPTY_LIST = "You must enter at least one value in this list because this flag is required."
INVALID = "Invalid value: %s"


def _write(stdout, option, *lines):
    try:
        for line in lines:
            stdout.write(line + "\n")
        stdout.flush()
    except (OSError, ValueError) as exception:
        raise PromptIOError(
            "unable to write the prompt for flag --%s: %s" % (option.name, exception),
            title="prompt output failed",
            code=FaultCode.PROMPT_IO,
            option=option,
            hint="check that the output stream is still open",
        ) from exception


def _read(stdin, option):
    """
    Read one line without its terminator; None means the stream is exhausted.
    """
    try:
        line = stdin.readline()
    except (OSError, ValueError) as exception:
        raise PromptIOError(
            "unable to read a value for flag --%s: %s" % (option.name, exception),
            title="prompt input failed",
            code=FaultCode.PROMPT_IO,
            option=option,
            hint="check that the input stream is still open",
        ) from exception
    if not line:
        return None
    return line.rstrip("\r\n")


def _exhausted(option):
    return EndOfInputError(
        "input ended before a value was entered for flag --%s" % option.name,
        title="end of input",
        code=FaultCode.END_OF_INPUT,
        option=option,
        hint="provide --%s on the command line or run the command interactively" % option.name,
    )


def _exceeded(option):
    logger.warning("retries_exceeded", option=option.name, retries=MAX_RETRIES)
    return RetriesExceededError(
        "max tries exceeded for flag --%s" % option.name,
        title="retries exceeded",
        code=FaultCode.RETRIES_EXCEEDED,
        option=option,
        hint="run the command again with a valid --%s value" % option.name,
    )


def _banner(stdout, option, *extra):
    _write(stdout, option, REQUIRED % option.name, USAGE % option.usage, *extra)


def _prompt_scalar(option, stdin, stdout):
    _banner(stdout, option)
    tries = 0
    while True:
        if tries > MAX_RETRIES:
            raise _exceeded(option)
        if (line := _read(stdin, option)) is None:
            raise _exhausted(option)
        if not line:
            # force the user to enter a value
            _banner(stdout, option)
            continue
        try:
            option.set(line)
        except InvalidValueError as exception:
            logger.debug("value_rejected", option=option.name, error=str(exception))
            _write(stdout, option, INVALID % exception)
            tries += 1
            continue
        return


def _prompt_list(option, stdin, stdout):
    _banner(stdout, option, LIST)
    # defaults are discarded: every element must come from the user
    option.reset()
    tries = 0
    received = 0
    while True:
        if tries > MAX_RETRIES:
            raise _exceeded(option)
        line = _read(stdin, option)
        if not line:
            if received:
                return
            if line is None:
                raise _exhausted(option)
            _write(stdout, option, EMPTY_LIST)
            _banner(stdout, option, LIST)
            continue
        try:
            option.append(line)
        except InvalidValueError as exception:
            logger.debug("value_rejected", option=option.name, error=str(exception))
            _write(stdout, option, INVALID % exception)
            tries += 1
            continue
        received += 1


def needs_prompt(option, /):
    """
    Decide whether a required option still needs a value from the user.

    True when
    - the option was never set, or
    - its current string value equals its no-argument default (a “suggested
      value” the user should confirm or override). The comparison is textual,
      so a value typed by the user that happens to equal the implicit value
      is prompted again.
    """
    if not option.changed:
        return True
    return option.implicit is not None and str(option.value) == option.implicit


def prompt(option, stdin, stdout, /):
    """
    Prompt for one option on the given streams and commit the parsed value.

    Dispatch
    - ListValue cells run the list protocol, ScalarValue cells the scalar one.

    Raises
    - RetriesExceededError: more than MAX_RETRIES rejected values.
    - EndOfInputError / PromptIOError: the streams cannot be used.
    """
    logger.debug("prompting", option=option.name)
    match option.value:
        case ListValue():
            _prompt_list(option, stdin, stdout)
        case ScalarValue():
            _prompt_scalar(option, stdin, stdout)
        case _:
            raise TypeError(f"prompt() unsupported value cell {type(option.value).__name__!r}")
    logger.debug("option_resolved", option=option.name, value=str(option.value))


def resolve(command, args=(), stdin=Unset, stdout=Unset, /):
    """
    Prompt for every required option of 'command' that lacks a real value.

    Parameters
    - command: the Command being dispatched.
    - args: positional arguments left after parsing (accepted for hook
      compatibility; not inspected).
    - stdin, stdout: text streams; default to command.stdin/command.stdout.
      They are borrowed and never closed.

    Behavior
    - Runs at most once per command instance: later calls return at once
      without any I/O. A failed run is not recorded, so it can be retried.
    - Declarations are visited in declaration order, whichever command made
      them. Each name is looked up on the command being dispatched; names it
      does not have are skipped silently.

    Raises
    - NilCommandError: command is None.
    - RetriesExceededError, EndOfInputError, PromptIOError: from prompt(),
      carrying the failing option and the command as options.
    """
    if command is None:
        raise NilCommandError(
            "resolve() saw command == None",
            title="nil command",
            code=FaultCode.NIL_COMMAND,
            hint="pass the command being executed",
        )

    stdin = coalesce(stdin, command.stdin)
    stdout = coalesce(stdout, command.stdout)
    requirements = command.requirements

    with requirements.lock:
        if requirements.resolved(command):
            logger.debug("resolution_skipped", command=command.name)
            return

        logger.debug("resolution_started", command=command.name, requirements=len(requirements))
        for entry in requirements:
            if (option := command.flag(entry.name)) is None:
                continue
            if not needs_prompt(option):
                continue
            try:
                prompt(option, stdin, stdout)
            except FlagException as exception:
                raise exception.__replace__(tool=command, option=option) from exception

        requirements.mark(command)


__all__ = (
    "MAX_RETRIES",
    "needs_prompt",
    "prompt",
    "resolve",
)
