"""
Offline console demo: chat with the phone advisor without any API keys.

Uses the real decision engine, planner, and tools against the built-in
sample catalog. Planned workflows are run to completion and their task
results summarised inline.

Usage:
    python console_demo.py
    python console_demo.py --scenario recommendation
    python console_demo.py --scenario price --seed 7
"""

import argparse
import asyncio
import logging
import random
import uuid
from typing import Optional

from phone_advisor.agent.engine import DecisionEngine
from phone_advisor.config import settings
from phone_advisor.logging_context import build_session_handler
from phone_advisor.schemas.decision_schema import (
    DecisionAction,
    DecisionContext,
    DecisionResult,
)

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


class ConsoleSession:
    """One shopper session driven from the terminal."""

    SCENARIOS: dict[str, list[str]] = {
        "recommendation": [
            "hello",
            "which phone would you recommend or suggest as the best phone",
            "what are the specs and features, tell me about the price",
        ],
        "price": [
            "is it cheap or expensive, what does it cost for my budget",
            "compare the difference versus the other one",
        ],
        "greeting": [
            "hi",
            "I'm confused, this is so complicated",
            "awesome, that's exactly what I wanted",
        ],
    }

    MAX_INPUT_LENGTH = 500

    def __init__(self, seed: Optional[int] = None, customer_id: Optional[str] = None) -> None:
        self.engine = DecisionEngine(rng=random.Random(seed))
        self.session_id = f"console-{uuid.uuid4().hex[:8]}"
        self.customer_id = customer_id

    def agent_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[{settings.agent_name}]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    async def run_scenario(self, scenario: str) -> None:
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        for step in steps:
            print(f"\n{BLUE}[Shopper] {RESET}{step}")
            await self._process_input(step)
        await self._summary()

    async def run(self) -> None:
        self._banner("Console Demo  (type 'quit' to exit)")
        while True:
            user_input = input(f"\n{BLUE}[Shopper] {RESET}").strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                break
            if len(user_input) > self.MAX_INPUT_LENGTH:
                self.agent_say("That was quite long. Could you keep it brief for me?")
                continue
            await self._process_input(user_input)
        await self._summary()

    async def _process_input(self, text: str) -> None:
        decision = await self.engine.make_decision(DecisionContext(
            session_id=self.session_id,
            customer_id=self.customer_id,
            user_input=text,
        ))
        self.system_log(
            f"Action: {decision.action.value} "
            f"(confidence {decision.confidence:.2f}) - {decision.reasoning}"
        )

        if decision.response:
            self.agent_say(decision.response)
        for question in decision.follow_up_questions or []:
            self.agent_say(question)

        if decision.action == DecisionAction.EXECUTE_WORKFLOW:
            await self._run_workflow(decision)
        elif decision.action == DecisionAction.USE_TOOL:
            await self._run_tool(decision)

    async def _run_workflow(self, decision: DecisionResult) -> None:
        outcome = await self.engine.run_workflow(decision.workflow_id)
        workflow = outcome.result
        if workflow is None:
            print(f"{RED}  {outcome.error}{RESET}")
            return

        self.system_log(f"Workflow '{workflow.name}' -> {workflow.status.value} "
                        f"in {outcome.waves} waves")
        for task in workflow.tasks:
            colour = GREEN if task.status.value == "completed" else YELLOW
            detail = task.error or _describe(task.result)
            print(f"{colour}    [{task.status.value}] {task.tool}{RESET}{DIM} {detail}{RESET}")

    async def _run_tool(self, decision: DecisionResult) -> None:
        result = await self.engine.tools.execute_tool(
            decision.tool_name, decision.tool_parameters or {}
        )
        if result.success:
            self.system_log(f"{decision.tool_name}: {_describe(result.data)}")
        else:
            print(f"{RED}  {decision.tool_name} failed: {result.error}{RESET}")

    async def _summary(self) -> None:
        state = await self.engine.get_agent_state(self.session_id)
        if state is None:
            return
        awareness = state.contextual_awareness
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{DIM}  Stage: {awareness.conversation_stage}, "
              f"purchase intent: {awareness.purchase_intent}{RESET}")
        print(f"{DIM}  Accuracy estimate: {state.performance_metrics.accuracy:.2f}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    @staticmethod
    def _banner(title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  PHONE ADVISOR - {title}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")


def _describe(data) -> str:
    if isinstance(data, dict):
        if "recommendations" in data:
            names = [p.get("name", p.get("id")) for p in data["recommendations"][:3]]
            return f"top picks: {', '.join(names)}"
        if "best_deal" in data:
            deal = data["best_deal"]
            return f"best deal: {deal['retailer']} ${deal['price']}" if deal else "nothing in stock"
        return ", ".join(sorted(data.keys()))
    if isinstance(data, list):
        return f"{len(data)} results"
    return ""


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline phone advisor demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for mock tool data")
    parser.add_argument("--customer", default=None, help="Customer id to attach to the session")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        handlers=[build_session_handler()],
        force=True,
    )

    session = ConsoleSession(seed=args.seed, customer_id=args.customer)
    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run())


if __name__ == "__main__":
    main()
