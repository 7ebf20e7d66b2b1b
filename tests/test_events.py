# tests/test_events.py
import json
import os

import pytest

from rankengine.events import RetweetEvent, TweetParser

DATA_PATH = os.path.join(os.path.dirname(__file__), "..", "data", "toy_tweets.jsonl")


def _retweet(src, dst, src_name="a", dst_name="b"):
    return json.dumps({
        "user": {"id_str": src, "screen_name": src_name},
        "retweeted_status": {"user": {"id_str": dst, "screen_name": dst_name}},
    })


def test_file_exists():
    assert os.path.exists(DATA_PATH), f"{DATA_PATH} not found"


def test_parse_line_retweet():
    parser = TweetParser()
    ev = parser.parse_line(_retweet("1", "2"))
    assert ev == RetweetEvent("1", "2")
    assert parser.retweets == 1


def test_numeric_id_falls_back_to_str():
    parser = TweetParser()
    line = json.dumps({"user": {"id": 7}, "retweeted_status": {"user": {"id": 8}}})
    assert parser.parse_line(line) == RetweetEvent("7", "8")


def test_empty_id_str_falls_back_to_numeric_id():
    parser = TweetParser()
    line = json.dumps({"user": {"id_str": "", "id": 7}, "retweeted_status": {"user": {"id_str": "8"}}})
    assert parser.parse_line(line) == RetweetEvent("7", "8")


@pytest.mark.parametrize("line", [
    "",
    "not json at all",
    "[1, 2, 3]",
    json.dumps({"user": {"id_str": "1"}}),
    json.dumps({"user": {"id_str": "1"}, "retweeted_status": None}),
    json.dumps({"user": {"screen_name": "x"}, "retweeted_status": {"user": {"id_str": "2"}}}),
    json.dumps({"user": {"id_str": "1"}, "retweeted_status": {"user": {}}}),
])
def test_bad_lines_are_dropped_not_raised(line):
    parser = TweetParser()
    assert parser.parse_line(line) is None
    assert parser.retweets == 0


def test_event_is_immutable():
    ev = RetweetEvent("1", "2")
    with pytest.raises(AttributeError):
        ev.retweeting_user_id = "3"


def test_iter_events_toy_counters():
    parser = TweetParser()
    events = list(parser.iter_events(DATA_PATH))
    # six retweets, including one duplicate pair and one self-retweet
    assert len(events) == 6
    assert parser.retweets == 6
    assert parser.skipped_not_retweet == 2
    assert parser.skipped_missing_id == 1
    assert parser.skipped_json == 2
    assert sum(1 for e in events if e.is_self_retweet) == 1


def test_iter_events_limit():
    parser = TweetParser()
    events = list(parser.iter_events(DATA_PATH, limit=2))
    assert events == [RetweetEvent("1001", "1002"), RetweetEvent("1003", "1004")]


def test_screen_names_are_cleaned():
    parser = TweetParser()
    list(parser.iter_events(DATA_PATH))
    assert parser.screen_names["1001"] == "diane"
    assert parser.screen_names["1002"] == "bob&co"
    assert parser.screen_names["1005"] == "parisa_café"


def test_iter_lines_in_memory():
    parser = TweetParser()
    events = list(parser.iter_lines([_retweet("1", "2"), "oops", _retweet("3", "3")]))
    assert events == [RetweetEvent("1", "2"), RetweetEvent("3", "3")]
    assert parser.lines == 3
