import hashlib
import json
from typing import Optional


def compute_fingerprint(
    source_url: str,
    part_count: int,
    summary_prompt_override: Optional[str] = None,
    image_prompt_override: Optional[str] = None,
) -> str:
    """Stable cache key and public job id for a generation request.

    Missing overrides hash the same as empty strings. Fields are JSON-encoded
    as a list so no two distinct requests share a digest input.
    """
    raw = json.dumps(
        [source_url, part_count, summary_prompt_override or "", image_prompt_override or ""],
        ensure_ascii=False,
        separators=(",", ":"),
    )
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
