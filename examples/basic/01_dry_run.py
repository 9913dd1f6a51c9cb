"""
01_dry_run.py - Walk through a setup plan without running anything

This example demonstrates:
- Loading a dev.yml with load_config()
- Running the ExecutionEngine against a MockExecutor (commands are recorded)
- Answering choices up front with prespecified_choices

Try it:
    python examples/basic/01_dry_run.py
"""
# ruff: noqa: T201

import asyncio
from pathlib import Path

from devlift import ExecutionEngine, MockExecutor, ScriptedPrompter, load_config, setup_logging

PROJECT_DIR = Path(__file__).parent / "web_app"


async def main():
    setup_logging(level="INFO")

    # Step 1: Load and validate the project's dev.yml
    config = load_config(PROJECT_DIR)

    # Step 2: Record commands instead of running them
    executor = MockExecutor()

    # Step 3: Pre-specified choices skip the interactive menus
    engine = ExecutionEngine(
        config,
        PROJECT_DIR,
        executor=executor,
        prompter=ScriptedPrompter(),
        prespecified_choices={"seed-data": "minimal", "open-project": "none"},
        skip_confirmations=True,
    )
    results = await engine.run()

    print("\nCommands that would run:")
    for command in executor.commands:
        print(f"  {command}")

    print("\nStep results:")
    for result in results:
        print(f"  {result}")


if __name__ == "__main__":
    asyncio.run(main())
