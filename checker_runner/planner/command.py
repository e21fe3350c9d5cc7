"""Ordered assembly of the compiler invocation.

The compiler frontend only accepts some argument orders: launcher flags must
precede the main class, overlays must be seen before the processor path, and
so on. The order is fixed by :class:`Section`; callers fill sections in any
order and :meth:`CommandBuilder.build` emits them in declaration order.
"""

import shlex
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

JAVAC_MAIN_CLASS = "com.sun.tools.javac.Main"
PROCESS_ONLY_FLAG = "-proc:only"


class Section(Enum):
    """Segments of the invocation, in emission order."""

    EXECUTABLE = "executable"
    MODULE_FLAGS = "module_flags"
    FRONTEND_OVERRIDE = "frontend_override"
    LAUNCHER_CLASSPATH = "launcher_classpath"
    MAIN_CLASS = "main_class"
    CLASSPATH_REFERENCE = "classpath_reference"
    PROCESSOR_PATH = "processor_path"
    PROCESSOR = "processor"
    PROCESSING_MODE = "processing_mode"
    STDLIB_OVERLAY = "stdlib_overlay"
    EXTRA_ARGS = "extra_args"
    SOURCES_REFERENCE = "sources_reference"


@dataclass(frozen=True)
class InvocationPlan:
    """Immutable, ordered compiler invocation."""

    arguments: tuple[str, ...]
    sections: tuple[tuple[Section, tuple[str, ...]], ...] = ()

    def __iter__(self) -> Iterator[str]:
        return iter(self.arguments)

    def __len__(self) -> int:
        return len(self.arguments)

    @property
    def executable(self) -> str:
        return self.arguments[0]

    def section(self, section: Section) -> tuple[str, ...]:
        """Tokens emitted for one section (empty if the section was not set)."""
        for name, tokens in self.sections:
            if name is section:
                return tokens
        return ()

    def to_list(self) -> list[str]:
        return list(self.arguments)

    def to_shell(self) -> str:
        """Shell-pasteable rendering, one token per line with continuations."""
        return " \\\n  ".join(shlex.quote(arg) for arg in self.arguments)


class CommandBuilder:
    """Collects tokens per section and assembles them in the fixed order."""

    def __init__(self) -> None:
        self._sections: dict[Section, list[str]] = {}

    def set(self, section: Section, *tokens: str) -> "CommandBuilder":
        """Replace the tokens of a section."""
        self._sections[section] = list(tokens)
        return self

    def extend(self, section: Section, tokens: list[str]) -> "CommandBuilder":
        """Append tokens to a section."""
        self._sections.setdefault(section, []).extend(tokens)
        return self

    def has(self, section: Section) -> bool:
        return bool(self._sections.get(section))

    def build(self) -> InvocationPlan:
        """Assemble the plan.

        Raises:
            ValueError: If no executable was set.
        """
        if not self.has(Section.EXECUTABLE):
            raise ValueError("An invocation plan needs an executable")

        arguments: list[str] = []
        sections: list[tuple[Section, tuple[str, ...]]] = []
        for section in Section:
            tokens = self._sections.get(section)
            if not tokens:
                continue
            arguments.extend(tokens)
            sections.append((section, tuple(tokens)))
        return InvocationPlan(arguments=tuple(arguments), sections=tuple(sections))
