from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from medspa_seeder.agents.base_agent import Agent
from medspa_seeder.config.logger import logger
from medspa_seeder.config.models.records import (
    ErrorRecord,
    RunFailure,
    RunResult,
    RunSuccess,
    RunSummary,
)
from medspa_seeder.config.models.seeder_input import SeederConfig, normalize_input
from medspa_seeder.config.settings import OverpassSettings, SeederDefaults
from medspa_seeder.tools.dedupe_tools import dedupe_records
from medspa_seeder.tools.extract_tools import extract_records
from medspa_seeder.utils.decorators import log_action
from medspa_seeder.utils.digest import query_hash
from medspa_seeder.utils.overpass import (
    build_name_pattern,
    build_query,
    elements_from_payload,
    run_query,
)

Tool = Callable[..., Any]


class SeederAgent(Agent):
    """
    Agent that finds med-spa-like places in a bounding box via the Overpass API
    and turns them into a deduplicated dataset.
    """

    def __init__(
        self,
        name: str = "SeederAgent",
        tools: Dict[str, Tool] | None = None,
        overpass_settings: Optional[OverpassSettings] = None,
        defaults: Optional[SeederDefaults] = None,
    ) -> None:
        """
        Constructor.
        :param name: The Agent name.
        :param tools: The tools to use, keyed by plan step.
        :param overpass_settings: Endpoint list, retry and query settings.
        :param defaults: Fallbacks for fields the run input leaves out.
        """
        default_tools: Dict[str, Tool] = {
            "run_query": run_query,
            "extract_records": extract_records,
            "dedupe_records": dedupe_records,
        }
        super().__init__(name=name, tools={**default_tools, **(tools or {})})
        self.overpass_settings = overpass_settings or OverpassSettings()
        self.defaults = defaults or SeederDefaults()

    def perceive(self, input_data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Normalize the run input and build the query text.
        :param input_data: Either accepted input shape, or None.
        :return: The observation: `config`, `name_pattern` and `query`.
        """
        config = normalize_input(input_data, self.defaults)
        name_pattern = build_name_pattern(config.keywords)
        query = build_query(name_pattern, config.bbox, settings=self.overpass_settings)
        logger.info(
            f"[{self.name}] query {query_hash(query)} for bbox "
            f"({config.bbox.to_overpass()}) with {len(config.keywords)} keywords"
        )
        return {"config": config, "name_pattern": name_pattern, "query": query}

    def plan(self, observation: Dict[str, Any]) -> List[str]:
        """
        Fixed three-step plan: fetch → extract → dedupe.
        """
        return ["run_query", "extract_records", "dedupe_records"]

    @log_action
    def act(self, action: str, context: Dict[str, Any]) -> Any:
        """
        Map action name to the corresponding tool and return its result.
        :param action: The name of the action.
        :param context: The data from `perceive()` and the earlier steps.
        :return: The action's result.
        """
        if action not in self.tools:
            raise ValueError(f"No tool named '{action}' found.")

        config: SeederConfig = context["config"]

        if action == "run_query":
            payload = self.tools[action](
                context["query"], settings=self.overpass_settings
            )
            context["elements"] = elements_from_payload(
                payload, strict=self.overpass_settings.strict_elements
            )
            return payload

        if action == "extract_records":
            return self.tools[action](
                context["elements"], config.keywords, config.city
            )

        if action == "dedupe_records":
            return self.tools[action](context["extract_records"])

        raise NotImplementedError(action)

    def achieve_goal(
        self, input_data: Any, context: Optional[Dict[str, Any]] = None
    ) -> RunResult:
        """
        Run the whole pipeline and report the outcome instead of raising.
        :param input_data: The raw run input.
        :param context: Optional dict filled with intermediate results.
        :return: `RunSuccess` with records and summary, or `RunFailure` with the error record.
        """
        context = context if context is not None else {}
        try:
            super().achieve_goal(input_data, context=context)
        except Exception as e:
            logger.error(f"[{self.name}] Fatal error during {context.get('step', 'perceive')}: {e}")
            return RunFailure(
                error=ErrorRecord.from_exception(e, context=self._partial_summary(context))
            )

        config: SeederConfig = context["config"]
        records = context["dedupe_records"]
        summary = RunSummary(
            found=len(context["extract_records"]),
            deduped=len(records),
            **config.echo(),
        )
        logger.info(
            f"[{self.name}] found={summary.found} deduped={summary.deduped}"
        )
        return RunSuccess(records=records, summary=summary)

    @staticmethod
    def _partial_summary(context: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        config = context.get("config")
        if config is None:
            return None
        partial: Dict[str, Any] = {"failed_step": context.get("step"), **config.echo()}
        if "extract_records" in context:
            partial["found"] = len(context["extract_records"])
        return partial
