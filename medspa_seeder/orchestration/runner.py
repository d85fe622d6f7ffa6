from typing import Optional

from medspa_seeder.agents.seeder_agent import SeederAgent
from medspa_seeder.config.logger import logger
from medspa_seeder.config.models.records import (
    ErrorRecord,
    RunFailure,
    RunResult,
)
from medspa_seeder.storage.base import ActorStorage
from medspa_seeder.tools.extract_tools import records_to_rows

SUMMARY_KEY = "RUN-SUMMARY"
ERROR_KEY = "ERROR"


def run_seeder(storage: ActorStorage, agent: Optional[SeederAgent] = None) -> RunResult:
    """
    Run one seeding pass against a storage backend.

    Outputs of earlier runs are purged first, keeping only `INPUT`. On success
    the deduplicated dataset is pushed and the summary stored under
    `RUN-SUMMARY`; on failure only the error record is stored under `ERROR`.

    :param storage: Provides the input and receives the outputs.
    :param agent: The agent to run; a default `SeederAgent` when omitted.
    :return: The run result, for callers that want to display it.
    """
    agent = agent or SeederAgent()
    storage.purge()

    try:
        input_data = storage.get_input()
    except Exception as e:
        logger.error(f"Failed to load the run input: {e}")
        failure = RunFailure(error=ErrorRecord.from_exception(e))
        storage.set_value(ERROR_KEY, failure.error.model_dump())
        return failure

    result = agent.achieve_goal(input_data or {})

    if isinstance(result, RunFailure):
        storage.set_value(ERROR_KEY, result.error.model_dump())
        return result

    try:
        storage.push_data(records_to_rows(result.records))
        storage.set_value(SUMMARY_KEY, result.summary.model_dump())
    except Exception as e:
        logger.exception(f"Failed to write run outputs: {e}")
        failure = RunFailure(
            error=ErrorRecord.from_exception(e, context=result.summary.model_dump())
        )
        storage.set_value(ERROR_KEY, failure.error.model_dump())
        return failure

    logger.info(
        f"Stored {result.summary.deduped} records ({result.summary.found} before dedupe)"
    )
    return result

