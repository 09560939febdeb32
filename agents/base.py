"""
Base Agent class and Orchestrator
Brand Presence Tracker

Every analysis stage is an Agent; the Orchestrator chains them so that the
output of one stage is the input of the next. The first failing stage ends
the run.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import traceback

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AgentResult:
    """Outcome of one stage: its output on success, the error message otherwise."""
    agent_name: str
    success: bool
    data: Any = None
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def duration_ms(self) -> Optional[float]:
        if self.started_at and self.finished_at:
            return (self.finished_at - self.started_at).total_seconds() * 1000
        return None

    def __repr__(self):
        status = "✅" if self.success else "❌"
        dur = f" ({self.duration_ms:.1f}ms)" if self.duration_ms is not None else ""
        detail = f": {self.error}" if self.error else ""
        return f"{status} {self.agent_name}{dur}{detail}"


class Agent(ABC):
    """
    Abstract base class for analysis stages.
    Subclasses implement `run(data)`; it must not keep state between calls.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"agent.{name}")

    @abstractmethod
    def run(self, data: Any) -> Any:
        raise NotImplementedError

    def execute(self, data: Any) -> AgentResult:
        """Run the stage, capturing any exception into the result."""
        started_at = _now()
        try:
            output = self.run(data)
        except Exception as e:
            self.logger.error(f"[{self.name}] Failed: {e}\n{traceback.format_exc()}")
            return AgentResult(self.name, False, error=str(e),
                               started_at=started_at, finished_at=_now())

        result = AgentResult(self.name, True, data=output,
                             started_at=started_at, finished_at=_now())
        self.logger.debug(f"[{self.name}] Completed in {result.duration_ms:.1f}ms")
        return result

    def __repr__(self):
        return f"<Agent: {self.name}>"


class Orchestrator:
    """
    Sequential stage runner.

    `execute()` returns the final stage's result, or the first failed one.
    `run_history` holds the results of the stages that actually ran.
    """

    def __init__(self, agents: List[Agent]):
        self.agents = agents
        self.logger = logging.getLogger("orchestrator")
        self.run_history: List[AgentResult] = []

    def execute(self, input_data: Any) -> AgentResult:
        self.run_history = []
        data = input_data

        for i, agent in enumerate(self.agents, 1):
            self.logger.debug(f"  [{i}/{len(self.agents)}] {agent.name}")
            result = agent.execute(data)
            self.run_history.append(result)
            if not result.success:
                self.logger.error(f"  ❌ '{agent.name}' failed: {result.error}")
                return result
            data = result.data

        total_ms = sum(r.duration_ms or 0.0 for r in self.run_history)
        self.logger.info(f"Analysis complete: {len(self.agents)} stages in {total_ms:.1f}ms")
        return self.run_history[-1]

    def summary(self) -> str:
        return "\n".join(["Analysis Summary:"] + [f"  {r}" for r in self.run_history])
