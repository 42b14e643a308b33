from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any

from regen_publisher.framework.results import PublishResult


def utc_now_iso8601() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def write_publish_report(path: str, result: PublishResult, *, run_id: str, created_at: str | None = None) -> None:
    payload: dict[str, Any] = {
        "run_id": run_id,
        "created_at": created_at or utc_now_iso8601(),
    }
    payload.update(result.to_dict())

    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as file:
        json.dump(payload, file, ensure_ascii=False, indent=2)
        file.write("\n")
