"""
flagprompt pre-run pipeline.

What this module provides
- Pipeline: the per-command list of pre-run callables, in two tiers:
  • hooks: caller-defined callables hook(command, args), run in attach order.
  • stages: interceptors installed by the library (the missing-option
    resolver), keyed by identity so repeated installs collapse to one entry.
- install(command, *, persistent=False): put the resolver stage on a command.
- run(command, args): execute the pipeline for the command being dispatched.

Ordering contract
- Persistent hooks of the ancestors run first (root first), then the command's
  own hooks, then every distinct stage (the command's own, plus the persistent
  stages of its ancestors). Stages always come after hooks, regardless of
  whether a hook was attached before or after an option was declared required.

Failure contract
- A hook that raises aborts the pass: the exception is wrapped into a
  ChainedHookError and no stage runs. Faults raised by stages propagate as-is.
"""
from .faults import FaultCode, ChainedHookError
from .logging import get_logger
from .prompts import resolve
from .utils import *

logger = get_logger(__name__)


class Pipeline:
    """
    Ordered pre-run callables of one command.

    Both tiers remember whether an entry is persistent (also runs when a
    descendant command is dispatched) or local.
    """

    def __init__(self):
        self._hooks = []
        self._stages = {}

    @property
    def hooks(self):
        return tuple(hook for hook, _ in self._hooks)

    @property
    def stages(self):
        return tuple(self._stages)

    def attach(self, hook, /, *, persistent=False):
        """
        Append a caller hook; the same callable may be attached twice on purpose.
        """
        if not callable(hook):
            raise TypeError("attach() argument must be callable")
        self._hooks.append((hook, bool(persistent)))
        return hook

    def intercept(self, stage, /, *, persistent=False):
        """
        Register a stage once; a later persistent install upgrades a local one.

        Returns True when the stage was not present before.
        """
        if not callable(stage):
            raise TypeError("intercept() argument must be callable")
        fresh = stage not in self._stages
        self._stages[stage] = self._stages.get(stage, False) or bool(persistent)
        return fresh

    def inherited(self):
        """
        Split entries visible to descendants: (persistent hooks, persistent stages).
        """
        return (
            [hook for hook, persistent in self._hooks if persistent],
            [stage for stage, persistent in self._stages.items() if persistent],
        )


@rename("resolver")
def _resolver(command, args, /):
    resolve(command, args, command.stdin, command.stdout)


def install(command, /, *, persistent=False):
    """
    Install the missing-option resolver as a stage of command's pipeline.

    Idempotent: declaring ten required options on one command installs one stage.
    """
    if command._pipeline.intercept(_resolver, persistent=persistent):
        logger.debug("resolver_installed", command=command.name, persistent=persistent)


def run(command, args, /):
    """
    Run the pre-run pipeline for the command being dispatched.

    Parameters
    - command: the Command whose callback is about to run.
    - args: positional arguments left after option parsing.

    Raises
    - ChainedHookError: a caller hook failed (original exception as __cause__).
    - Any FlagException raised by a stage (e.g., RetriesExceededError).
    """
    hooks = []
    stages = {}

    for ancestor in command.path[:-1]:
        inherited_hooks, inherited_stages = ancestor._pipeline.inherited()
        hooks.extend(inherited_hooks)
        stages.update(dict.fromkeys(inherited_stages))
    hooks.extend(command._pipeline.hooks)
    stages.update(dict.fromkeys(command._pipeline.stages))

    for hook in hooks:
        try:
            hook(command, args)
        except Exception as exception:
            logger.debug("hook_failed", command=command.name, hook=getattr(hook, "__qualname__", repr(hook)))
            raise ChainedHookError(
                "pre-run hook %r of command %r failed: %s" % (
                    getattr(hook, "__qualname__", repr(hook)), command.name, exception
                ),
                title="pre-run hook failed",
                code=FaultCode.CHAINED_HOOK,
                tool=command,
                hook=hook,
                hint="fix the error reported by the hook; required options were not prompted",
            ) from exception

    for stage in stages:
        stage(command, args)


__all__ = (
    "Pipeline",
    "install",
    "run",
)
