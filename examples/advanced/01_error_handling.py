"""
Example: Handling devlift errors

Every devlift failure derives from DevliftError, so callers can catch the
specific cases they care about and fall back to the base class for the rest.

Try it:
    python examples/advanced/01_error_handling.py
"""
# ruff: noqa: T201

import asyncio

from devlift import (
    CircularDependencyError,
    DevliftError,
    ExecutionEngine,
    ExternalProcessError,
    InvalidChoiceError,
    MockExecutor,
    ScriptedPrompter,
    parse_config,
)

CYCLIC = """
version: '1'
setup_steps:
  - {name: A, type: shell, command: echo A, depends_on: [C]}
  - {name: B, type: shell, command: echo B, depends_on: [A]}
  - {name: C, type: shell, command: echo C, depends_on: [B]}
"""

CHOICE = """
version: '1'
setup_steps:
  - name: env
    type: choice
    prompt: Which environment?
    choices:
      - {name: Development, value: dev}
      - {name: Production, value: prod}
      - {name: Skip, value: skip}
"""

FAILING = """
version: '1'
setup_steps:
  - {name: build, type: shell, command: make build}
  - {name: test, type: shell, command: make test}
"""


async def main():
    # 1. A dependency cycle is rejected while loading
    try:
        parse_config(CYCLIC, "yaml")
    except CircularDependencyError as e:
        print(f"Cycle: {e}")

    # 2. A bad pre-specified choice fails before any command runs
    engine = ExecutionEngine(
        parse_config(CHOICE, "yaml"),
        ".",
        executor=MockExecutor(),
        prompter=ScriptedPrompter(),
        prespecified_choices={"env": "staging"},
    )
    try:
        await engine.run()
    except InvalidChoiceError as e:
        print(f"Choice: {e}")

    # 3. A non-zero exit aborts the remaining steps
    executor = MockExecutor(exit_codes={"make build": 2})
    engine = ExecutionEngine(
        parse_config(FAILING, "yaml"),
        ".",
        executor=executor,
        prompter=ScriptedPrompter(),
        skip_confirmations=True,
    )
    try:
        await engine.run()
    except ExternalProcessError as e:
        print(f"Process: {e} (ran: {executor.commands})")
    except DevliftError as e:
        print(f"Other devlift error: {e}")


if __name__ == "__main__":
    asyncio.run(main())
