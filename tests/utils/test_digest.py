import re

from medspa_seeder.utils.digest import query_hash, summarize


def test_summarize_payload():
    out = summarize({"elements": [{"id": 1}, {"id": 2}, {"id": 3}]})
    assert out.startswith("elements=3 ")
    assert re.search(r"sha256=[0-9a-f]{8}$", out)


def test_summarize_malformed_payload():
    assert summarize({"elements": None}).startswith("elements=0 ")


def test_summarize_list():
    assert summarize([1, 2]) == "count=2"


def test_summarize_long_string():
    out = summarize("x" * 250, max_len=50)
    assert out.endswith("…")
    assert len(out) == 51


def test_query_hash_stable_unique():
    h1a = query_hash("node(1);out;")
    h1b = query_hash("node(1);out;")
    h2 = query_hash("node(2);out;")

    assert h1a == h1b
    assert h1a != h2
    assert re.fullmatch(r"[0-9a-f]{8}", h1a)
