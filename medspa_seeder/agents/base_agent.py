from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from medspa_seeder.config.logger import logger
from medspa_seeder.utils.digest import summarize


class Agent(ABC):
    """
    Abstract agent class: perceive the input, plan steps, act on each with a tool.
    """

    def __init__(self, name: str, tools: Dict[str, Any]) -> None:
        """
        Initialize the Agent.

        :param name: A unique identifier for the agent.
        :param tools: A mapping of tool names to callables.
        """
        self.name = name
        self.tools: Dict[str, Any] = tools

    @abstractmethod
    def perceive(self, input_data: Any) -> Any:
        """
        Observe or parse incoming data.

        :param input_data: Raw input.
        :return: Processed observation.
        """
        pass

    @abstractmethod
    def plan(self, observation: Any) -> List[str]:
        """
        Decide on a list of actions to achieve the agent's goal.

        :param observation: Output from perceive().
        :return: A sequence of action names.
        """
        pass

    @abstractmethod
    def act(self, action: str, context: Dict[str, Any]) -> Any:
        """
        Execute a single action using the specified tool.

        :param action: The name of the action/tool to invoke.
        :param context: A dict carrying necessary data from previous steps.
        :return: Result of the action.
        """
        pass

    def remember(self, step: str, result: Any) -> None:
        """
        Record the outcome of an action in the run log.

        :param step: The action that was executed.
        :param result: The result of the action.
        """
        logger.debug(f"[{self.name}] {step} -> {summarize(result)}")

    def achieve_goal(
        self, input_data: Any, context: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Orchestrate the perceive-plan-act cycle, sharing one context between steps.

        :param input_data: Initial data for perception.
        :param context: Optional dict to fill in place, so a caller can inspect
            how far the run got if a step raises.
        :return: The final context.
        """
        context = context if context is not None else {}
        observation = self.perceive(input_data)
        context.update(observation)

        for step in self.plan(observation):
            context["step"] = step
            result = self.act(step, context)
            self.remember(step, result)
            context[step] = result
        return context
