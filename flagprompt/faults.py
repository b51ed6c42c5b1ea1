"""
flagprompt faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing fault.
  Codes are grouped by domain to keep logs and searches predictable.
- FlagException: base type that carries a message plus keyword options and
  knows how to render itself with rich (header, message, hint).
- Concrete faults for the three phases a required option goes through:
  declaration, pre-run hooks and interactive prompting, plus the few parse
  faults raised by the host command layer.

Integration
- Declaration faults are raised synchronously to the declaring call site.
- Prompting faults are raised by flagprompt.prompts; InvalidValueError is the
  only recoverable one and never escapes the prompt loop.
- Command.trigger() raises faults, or prints them and exits when the command
  runs in shell mode.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the package (stable identifiers).

    grouping
    - routing and switches raised by the host parser (111xx)
      • UNKNOWN_COMMAND, UNKNOWN_SWITCH, OPTION_VALUE_REQUIRED
    - declarations (131xx)
      • NO_SUCH_OPTION, NIL_COMMAND
    - pre-run pipeline (1311x)
      • CHAINED_HOOK
    - prompting (1312x / 1313x)
      • INVALID_VALUE, RETRIES_EXCEEDED, PROMPT_IO, END_OF_INPUT

    normalize() lets the host remap codes to its own labels while the numeric
    identifiers stay stable.
    """
    # --- host parser faults (11xxx) ---
    UNKNOWN_COMMAND             = 11101
    UNKNOWN_SWITCH              = 11112
    OPTION_VALUE_REQUIRED       = 11117

    # --- declaration faults (131xx) ---
    NO_SUCH_OPTION              = 13101
    NIL_COMMAND                 = 13102

    # --- pipeline faults (1311x) ---
    CHAINED_HOOK                = 13111

    # --- prompting faults (1312x / 1313x) ---
    INVALID_VALUE               = 13121
    RETRIES_EXCEEDED            = 13122
    PROMPT_IO                   = 13131
    END_OF_INPUT                = 13132

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class FlagException(Exception):
    """
    Base fault: a message plus read-only keyword options.

    Recognized options
    - title, code, hint: header and footer of the rendered fault.
    - tool: the Command the fault belongs to (its root names the program).
    - option: the Option being declared or prompted, when there is one.
    - colorful, fancy: rendering switches (default False).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message if self.message is not Unset else ""

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        tool = self.options.get("tool")
        prog = getattr(main, "__prog__", tool.root.name if tool else "flagprompt")
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " — ",
            text(code.normalize() if code else "", "code"),
            " | ",
            text(str(self.options.get("title", "error")).title(), "error-title"),
            " ]"
        )
        renders = [header, text(str(self), "error-message")]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*renders[1:]), title=header, title_align="left")

        return Group(*renders)

    def __trigger__(self):
        """
        Print this fault on stderr and exit with status 1 (shell mode).
        """
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        replica = type(self)(self.message, **{**self.options, **overrides})
        replica.__cause__ = self.__cause__
        return replica


# declaration faults
class NoSuchOptionError(FlagException): ...
class NilCommandError(FlagException): ...

# pipeline faults
class ChainedHookError(FlagException): ...

# prompting faults
class InvalidValueError(FlagException): ...
class RetriesExceededError(FlagException): ...
class PromptIOError(FlagException): ...
class EndOfInputError(PromptIOError): ...

# host parser faults
class UnknownCommandError(FlagException): ...
class UnknownSwitchError(FlagException): ...
class OptionValueRequiredError(FlagException): ...


__all__ = (
    "FaultCode",
    "FlagException",
    "NoSuchOptionError",
    "NilCommandError",
    "ChainedHookError",
    "InvalidValueError",
    "RetriesExceededError",
    "PromptIOError",
    "EndOfInputError",
    "UnknownCommandError",
    "UnknownSwitchError",
    "OptionValueRequiredError",
)
