"""
Explicit registry of transform rules.

Rules are registered by class or by instance, either statically with the
register_rule decorator or from "package.module:ClassName" paths taken from
configuration. The registry hands the pipeline a finite list of ready
instances; abstract and unconstructable entries never reach it.
"""

import importlib
import inspect
import logging
from typing import Optional, Union

from graphtransform.errors import UninstantiableRule
from .base import TransformRule

logger = logging.getLogger(__name__)

RuleEntry = Union[type, TransformRule]


class RuleRegistry:
    """
    Holds the rules available to a pipeline run.

    Usage:
        registry = RuleRegistry()

        @registry.register
        class PeopleRule(TransformRule):
            ...

        registry.register(LabelDocumentRule("Person", index="people"))
        registry.register_path("myrules.emails:EmailRule")

        rules = registry.rules()
    """

    def __init__(self):
        self._entries: list[RuleEntry] = []
        self.failures: list[UninstantiableRule] = []

    def register(self, rule: RuleEntry) -> RuleEntry:
        """Register a rule class or instance. Returns it, so it works as a decorator."""
        self._entries.append(rule)
        return rule

    def register_path(self, path: str) -> Optional[type]:
        """
        Import and register a rule class from "package.module:ClassName".

        Returns:
            The registered class, or None if it could not be imported
        """
        module_name, sep, class_name = path.partition(":")
        if not sep:
            module_name, _, class_name = path.rpartition(".")

        try:
            module = importlib.import_module(module_name)
            cls = getattr(module, class_name)
        except (ImportError, AttributeError, ValueError) as e:
            self._fail(path, e)
            return None

        self.register(cls)
        return cls

    def _fail(self, name: str, cause: Exception) -> None:
        failure = UninstantiableRule(f"Couldn't instantiate TransformRule {name}: {cause}")
        self.failures.append(failure)
        logger.error(str(failure))

    def rules(self) -> list[TransformRule]:
        """
        Build the list of rule instances.

        Abstract classes are skipped. Classes that fail to construct are
        logged and skipped; they never fail the caller.
        """
        instances = []

        for entry in self._entries:
            if isinstance(entry, TransformRule):
                instances.append(entry)
                continue

            if not (inspect.isclass(entry) and issubclass(entry, TransformRule)):
                logger.warning(f"Ignoring {entry!r}: not a TransformRule")
                continue

            if inspect.isabstract(entry):
                logger.debug(f"Skipping abstract TransformRule {entry.__name__}")
                continue

            try:
                instances.append(entry())
            except Exception as e:
                self._fail(entry.__name__, e)

        return instances

    def __len__(self) -> int:
        return len(self._entries)


# Global registry instance
default_registry = RuleRegistry()


def register_rule(rule: RuleEntry) -> RuleEntry:
    """Register a rule with the default registry."""
    return default_registry.register(rule)
