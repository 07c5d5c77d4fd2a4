"""Topic discovery – one search-grounded scan for the day's trending AI topics."""

from __future__ import annotations

import logging

from omniintel.config import Settings
from omniintel.errors import DiscoveryError
from omniintel.gemini import GeminiClient
from omniintel.models import Topic, TopicScan

logger = logging.getLogger(__name__)

SOURCE_GROUPS = [
    "Core tech circles: Twitter/X AI influencers, Reddit (r/LocalLLaMA, r/MachineLearning), "
    "Hugging Face Papers",
    "Tech media: TechCrunch, The Verge, Wired, Medium (Towards Data Science)",
    "Chinese communities: Bilibili, WeChat official accounts (Synced, QbitAI), Zhihu, Jike",
    "Mainstream news: BBC Technology, CNN Business, Bloomberg",
]


def _build_scan_prompt(topic_count: int) -> str:
    sources = "\n".join(f"{i}. {group}" for i, group in enumerate(SOURCE_GROUPS, start=1))
    return f"""You are an all-round AI intelligence officer.
Search the web and find the {topic_count} hottest, most discussed developments in the AI
field from the last 24 hours.

Sources to cover:
{sources}

Selection criteria:
- Mix the types: not only new model releases, but also industry events, policy and
  regulation, moves by the big players (OpenAI / Google / Meta) and interesting AI
  applications or demos.
- Everything must be fresh (within 24-48 hours).

Output format:
Return ONLY a valid JSON array. No markdown code fences, no explanations.

Example object:
[
  {{
    "id": "id-1",
    "title": "headline",
    "summary": "one-sentence summary",
    "platformTags": ["Bilibili", "TechCrunch"],
    "impactScore": 88,
    "category": "Industry News"
  }}
]"""


class TopicScanner:
    def __init__(self, client: GeminiClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    def discover(self) -> list[Topic]:
        """Scan for trending topics. Raises DiscoveryError on any failure."""
        prompt = _build_scan_prompt(self._settings.topic_count)

        try:
            result = self._client.generate(
                prompt,
                model_id=self._settings.scan_model_id,
                response_model=TopicScan,
                use_search_grounding=True,
            )
        except Exception as exc:
            logger.exception("Intelligence scan failed")
            raise DiscoveryError(f"Topic scan failed: {exc}") from exc

        if not isinstance(result, TopicScan) or not result.root:
            raise DiscoveryError("Topic scan returned no topics")

        topics = _ensure_unique_ids(result.root)
        logger.info("Scan discovered %d topics", len(topics))
        return topics


def _ensure_unique_ids(topics: list[Topic]) -> list[Topic]:
    """Replace blank or repeated ids with ``topic-<n>`` so ids are unique within a scan."""
    seen: set[str] = set()
    unique: list[Topic] = []
    for index, topic in enumerate(topics, start=1):
        topic_id = topic.id.strip()
        if not topic_id or topic_id in seen:
            topic_id = f"topic-{index}"
            while topic_id in seen:
                topic_id = f"{topic_id}-{index}"
            topic = topic.model_copy(update={"id": topic_id})
        seen.add(topic_id)
        unique.append(topic)
    return unique
