import pytest

from medspa_seeder.agents.seeder_agent import SeederAgent
from medspa_seeder.config.models.records import RunFailure, RunSuccess
from medspa_seeder.utils.errors import EndpointExhausted, TransportFailure
from tests.conftest import SAN_ANTONIO_BBOX, element

PAYLOAD = {
    "elements": [
        element(1, {"leisure": "spa", "name": "Glow Med Spa", "website": "https://a.com"}),
        element(2, {"shop": "beauty", "name": "Glow Med Spa North", "website": "a.com"}),
        element(3, {"amenity": "clinic"}),
        element(4, {"shop": "beauty", "name": "Luxe Aesthetics"}, lat=29.4, lon=-98.5),
    ]
}


def make_agent(ovp_settings, run_stub):
    return SeederAgent(
        name="SeederAgent",
        tools={"run_query": run_stub},
        overpass_settings=ovp_settings,
    )


def test_successful_run(ovp_settings):
    queries = []

    def run_stub(query, settings=None):
        queries.append(query)
        assert settings is ovp_settings
        return PAYLOAD

    agent = make_agent(ovp_settings, run_stub)
    context = {}
    result = agent.achieve_goal(
        {"bbox": SAN_ANTONIO_BBOX, "keywords": ["aesthetic", "med spa"]},
        context=context,
    )

    assert isinstance(result, RunSuccess)
    assert result.success
    assert [r.name for r in result.records] == ["Glow Med Spa", "Luxe Aesthetics"]
    assert result.summary.found == 3
    assert result.summary.deduped == 2
    assert result.summary.bbox == SAN_ANTONIO_BBOX
    assert result.summary.keywords == ["aesthetic", "med spa"]
    assert result.summary.city == "San Antonio"
    assert result.summary.hint

    assert len(queries) == 1
    assert '["name"~"(?i)(aesthetic|med spa)"]' in queries[0]
    assert context["name_pattern"] == "(?i)(aesthetic|med spa)"
    assert len(context["elements"]) == 4


def test_invalid_configuration_stops_before_fetch(ovp_settings):
    def run_stub(*_, **__):
        pytest.fail("run_query must not be called for an invalid bbox")

    agent = make_agent(ovp_settings, run_stub)
    result = agent.achieve_goal({"bbox": {"south": 120, "west": 0, "north": 0, "east": 0}})

    assert isinstance(result, RunFailure)
    assert not result.success
    assert result.error.error_type == "InvalidConfiguration"
    assert "Invalid bbox coordinates" in result.error.message
    assert result.error.context is None
    assert "InvalidConfiguration" in result.error.stack


def test_endpoint_exhaustion_is_reported(ovp_settings):
    def run_stub(*_, **__):
        raise EndpointExhausted(
            "All 3 Overpass endpoints failed", last_error=TransportFailure("HTTP 504")
        )

    agent = make_agent(ovp_settings, run_stub)
    result = agent.achieve_goal({"city": "Austin"})

    assert isinstance(result, RunFailure)
    assert result.error.error_type == "EndpointExhausted"
    assert result.error.message == "All 3 Overpass endpoints failed"
    assert result.error.context["failed_step"] == "run_query"
    assert result.error.context["city"] == "Austin"
    assert "found" not in result.error.context


def test_malformed_payload_is_lenient_by_default(ovp_settings):
    agent = make_agent(ovp_settings, lambda query, settings=None: {"remark": "oops"})
    result = agent.achieve_goal({})

    assert isinstance(result, RunSuccess)
    assert result.records == []
    assert result.summary.found == 0
    assert result.summary.deduped == 0


def test_malformed_payload_fails_in_strict_mode(ovp_settings):
    strict = ovp_settings.model_copy(update={"strict_elements": True})
    agent = make_agent(strict, lambda query, settings=None: {"remark": "oops"})
    result = agent.achieve_goal({})

    assert isinstance(result, RunFailure)
    assert result.error.error_type == "MalformedResponse"


def test_failure_after_extraction_keeps_found_count(ovp_settings):
    def broken_dedupe(records):
        raise RuntimeError("dedupe exploded")

    agent = SeederAgent(
        tools={
            "run_query": lambda query, settings=None: PAYLOAD,
            "dedupe_records": broken_dedupe,
        },
        overpass_settings=ovp_settings,
    )
    result = agent.achieve_goal({})

    assert isinstance(result, RunFailure)
    assert result.error.context["failed_step"] == "dedupe_records"
    assert result.error.context["found"] == 3


def test_plan_and_unknown_action(ovp_settings):
    agent = make_agent(ovp_settings, lambda *a, **k: PAYLOAD)
    assert agent.plan({}) == ["run_query", "extract_records", "dedupe_records"]

    with pytest.raises(ValueError, match="No tool named 'geocode'"):
        agent.act("geocode", {"config": None})
