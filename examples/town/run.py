"""Small-town simulation: residents chat, form opinions and reflect.

Run with the offline heuristic oracle:

    python -m examples.town.run --agents 20 --ticks 30

Use a hosted model (requires provider/model + API key in the environment):

    ORACLE_PROVIDER=openai ORACLE_MODEL=gpt-4o-mini python -m examples.town.run --agents 5
"""

from __future__ import annotations

import argparse
import asyncio
import random
from typing import List

from populace import (
    AgentState,
    Clock,
    Config,
    ConversationEntry,
    SimulationEngine,
    build_oracle,
    populate,
)
from populace.logging_utils import Color, colored, log_info

OPENERS = [
    "Hi! Lovely morning, isn't it?",
    "How are you holding up this week?",
    "Did you hear the market is closing early today?",
    "Thank you for the help yesterday, it was great.",
    "That advice was wrong and honestly confusing.",
    "Remember the town meeting, it's important.",
]

PLACES = ["home", "office", "park", "cafe"]


def schedule_conversation(
    engine: SimulationEngine, speaker: AgentState, listener: AgentState, delay: int, rng: random.Random
) -> None:
    """Queue a two-line exchange between two residents."""

    opener = rng.choice(OPENERS)

    async def converse(_payload) -> None:
        history = [ConversationEntry(speaker=speaker.full_name, text=opener)]
        reply = await listener.generate_utterance(history)
        await listener.observe_interaction(speaker.agent_id, opener)
        await speaker.observe_interaction(listener.agent_id, reply)
        print(colored(f"  {speaker.full_name}: {opener}", Color.CYAN))
        print(colored(f"  {listener.full_name}: {reply}", Color.CYAN))

    engine.events.schedule("conversation", delay, None, converse)


def schedule_visit(engine: SimulationEngine, agent: AgentState, delay: int, rng: random.Random) -> None:
    place = engine.environment.location(rng.choice(PLACES))

    def visit(resident: AgentState, location) -> None:
        resident.memory.record("episodic", f"Spent time at the {location.name}", 3)

    engine.schedule_for_agent(agent.agent_id, "visit", delay, place, visit)


def print_summary(engine: SimulationEngine) -> None:
    print("\n=== Town summary ===")
    print(f"Virtual time: {engine.clock.formatted()}  ticks: {engine.tick_count}")
    for agent in engine.all_agents()[:10]:
        counts = agent.memory.counts()
        friends = sorted(
            agent.relationships.snapshot().items(), key=lambda item: item[1], reverse=True
        )
        best = f"{friends[0][0]} ({friends[0][1]:.1f})" if friends else "-"
        print(
            f"  {agent.full_name:<22} memories e/s/p={counts['episodic']}/{counts['semantic']}/"
            f"{counts['procedural']}  plans={len(agent.current_plans())}  closest={best}"
        )


async def run_town(agents: int, ticks: int, seed: int | None) -> SimulationEngine:
    rng = random.Random(seed)
    engine = SimulationEngine(Clock(scale=Config.TIME_SCALE))
    oracle = build_oracle()
    residents: List[AgentState] = populate(engine, agents, oracle, seed=seed)

    for resident in residents:
        await resident.create_plan(rng.choice(resident.profile.goals))

    # Spread conversations and visits across the whole run.
    horizon = ticks * int(Config.TICK_INTERVAL_SECONDS * 1000 * Config.TIME_SCALE)
    for _ in range(agents * 2):
        speaker, listener = rng.sample(residents, 2)
        schedule_conversation(engine, speaker, listener, rng.randint(0, horizon), rng)
    for resident in residents:
        schedule_visit(engine, resident, rng.randint(0, horizon), rng)

    def make_progress(agent: AgentState, now: int) -> None:
        # Upkeep already holds the agent lock.
        for plan in agent.plans.active_plans():
            if rng.random() < 0.02:
                agent.plans.set_status(plan.id, "completed")
                log_info(f"{agent.full_name} completed '{plan.goal}' at {engine.clock.formatted()}")

    engine.upkeep_hooks.append(make_progress)
    await engine.run(max_ticks=ticks)
    return engine


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Small-town generative agent simulation")
    parser.add_argument("--agents", type=int, default=min(Config.POPULATION_SIZE, 20), help="Number of residents")
    parser.add_argument("--ticks", type=int, default=30, help="Number of ticks to simulate")
    parser.add_argument("--seed", type=int, default=None, help="Seed for profiles and schedules")
    return parser.parse_args()


async def main(args: argparse.Namespace) -> None:
    try:
        Config.validate()
    except ValueError as exc:
        print(f"[warning] {exc}. Falling back to the heuristic oracle.")
        Config.ORACLE_PROVIDER = "heuristic"

    print(Config.display())
    if args.agents < 2:
        raise SystemExit("Need at least two residents for conversations")

    engine = await run_town(args.agents, args.ticks, args.seed)
    print_summary(engine)


if __name__ == "__main__":
    asyncio.run(main(parse_args()))
