# rankengine/events.py
import html
import json
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from ftfy import fix_text


@dataclass(frozen=True)
class RetweetEvent:
    """One retweet: `retweeting_user_id` retweeted a tweet by `retweeted_user_id`."""

    retweeting_user_id: str
    retweeted_user_id: Optional[str]

    @property
    def is_self_retweet(self) -> bool:
        return self.retweeting_user_id == self.retweeted_user_id


def _user_id(user) -> Optional[str]:
    """`id_str` first, numeric `id` as the fallback."""
    if not isinstance(user, dict):
        return None
    uid = user.get("id_str")
    if not uid and user.get("id") is not None:
        uid = str(user["id"])
    if not uid:
        return None
    return str(uid)


class TweetParser:
    """
    Robust parser for line-delimited tweet JSON (one tweet object per line).

    What it does:
    - Keeps only tweets with a non-null `retweeted_status` back-reference
    - Identifies both users by their id fields (`id_str`, falling back to `id`),
      never by display names
    - Remembers each user's screen name, cleaned with html.unescape + ftfy,
      so reports can show something readable next to the ids

    Bad lines are skipped, never raised. The counters tell you how many:
        lines, retweets, skipped_json, skipped_not_retweet, skipped_missing_id

    Methods:
        parse_line(line: str) -> RetweetEvent | None
        iter_events(path: str, limit: int | None = None) -> Iterator[RetweetEvent]
        iter_lines(lines: Iterable[str]) -> Iterator[RetweetEvent]
    """

    def __init__(self):
        self.screen_names: dict[str, str] = {}
        self.lines = 0
        self.retweets = 0
        self.skipped_json = 0
        self.skipped_not_retweet = 0
        self.skipped_missing_id = 0

    def clean_name(self, name: str) -> str:
        """Fix mojibake and HTML entities in a display string."""
        return fix_text(html.unescape(name)).strip()

    def _remember(self, user, uid: str) -> None:
        name = user.get("screen_name") if isinstance(user, dict) else None
        if isinstance(name, str) and name:
            self.screen_names[uid] = self.clean_name(name)

    def parse_tweet(self, tweet) -> Optional[RetweetEvent]:
        """
        Turn an already-decoded tweet object into a RetweetEvent.
        Returns None for anything that is not a usable retweet.
        """
        if not isinstance(tweet, dict):
            self.skipped_json += 1
            return None

        original = tweet.get("retweeted_status")
        if not original:
            self.skipped_not_retweet += 1
            return None

        user = tweet.get("user")
        retweeted_user = original.get("user") if isinstance(original, dict) else None
        src = _user_id(user)
        dst = _user_id(retweeted_user)
        if src is None or dst is None:
            self.skipped_missing_id += 1
            return None

        self._remember(user, src)
        self._remember(retweeted_user, dst)
        self.retweets += 1
        return RetweetEvent(src, dst)

    def parse_line(self, line: str) -> Optional[RetweetEvent]:
        """
        Parse a single JSON line.
        Returns:
            RetweetEvent on success
            None if the line is blank, not JSON, or not a retweet
        """
        self.lines += 1
        line = line.strip()
        if not line:
            self.skipped_json += 1
            return None
        try:
            tweet = json.loads(line)
        except json.JSONDecodeError:
            self.skipped_json += 1
            return None
        return self.parse_tweet(tweet)

    def iter_lines(self, lines: Iterable[str]) -> Iterator[RetweetEvent]:
        for line in lines:
            ev = self.parse_line(line)
            if ev is not None:
                yield ev

    def iter_events(self, path: str, limit: int | None = None) -> Iterator[RetweetEvent]:
        """
        Stream RetweetEvents from a JSON-lines file. `limit` caps the number of
        raw lines read, not the number of events produced.
        """
        with open(path, "r", encoding="utf-8", errors="ignore") as f:
            for i, line in enumerate(f):
                if limit is not None and i >= limit:
                    break
                ev = self.parse_line(line)
                if ev is not None:
                    yield ev

    def summary(self) -> str:
        return (f"[TweetParser] lines={self.lines} retweets={self.retweets} "
                f"bad_json={self.skipped_json} not_retweet={self.skipped_not_retweet} "
                f"missing_id={self.skipped_missing_id}")


if __name__ == "__main__":
    from rankengine.paths import TOY_TWEETS_PATH

    parser = TweetParser()
    for ev in parser.iter_events(TOY_TWEETS_PATH):
        print(ev)
    print(parser.summary())
