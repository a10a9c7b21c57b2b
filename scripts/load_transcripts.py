"""Load transcript payload files into the system via the ingestion pipeline.

Each JSON file holds one ingest payload (the same body ``POST /api/ingest``
accepts) or a list of them.
"""

import argparse
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError

from src.api.deps import build_services
from src.api.models import IngestRequest
from src.config import get_settings
from src.logging_utils import configure_logging


def read_payloads(path: Path) -> list[tuple[str, dict]]:  # type: ignore[type-arg]
    """Return ``(label, payload)`` pairs from a file or a directory of ``*.json``."""
    files = sorted(path.glob("*.json")) if path.is_dir() else [path]
    payloads: list[tuple[str, dict]] = []  # type: ignore[type-arg]
    for filepath in files:
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
        items = data if isinstance(data, list) else [data]
        for i, item in enumerate(items):
            label = filepath.name if len(items) == 1 else f"{filepath.name}[{i}]"
            payloads.append((label, item))
    return payloads


def load_transcripts(source: str, dry_run: bool = False, max_items: int | None = None) -> int:
    """Ingest every payload under ``source``; returns the number of errors."""
    path = Path(source)
    if not path.exists():
        print(f"{source} not found.")
        return 1

    payloads = read_payloads(path)
    if max_items:
        payloads = payloads[:max_items]

    print(f"{'Validating' if dry_run else 'Loading'} {len(payloads)} transcripts...")

    pipeline = None
    if not dry_run:
        settings = get_settings()
        configure_logging(settings.log_level)
        pipeline = build_services(settings).pipeline

    loaded = 0
    errors = 0
    for i, (label, payload) in enumerate(payloads):
        try:
            request = IngestRequest.model_validate(payload)
        except ValidationError as e:
            errors += 1
            print(f"  [{i + 1}] INVALID {label}: {e.error_count()} validation errors")
            continue

        if pipeline is None:
            print(f"  [{i + 1}/{len(payloads)}] OK {request.transcript_id}")
            continue

        try:
            outcome = pipeline.ingest(request.to_input())
        except Exception as e:
            errors += 1
            print(f"  [{i + 1}] ERROR {label}: {e}")
            continue

        loaded += 1
        print(
            f"  [{i + 1}/{len(payloads)}] {outcome.status.value} {request.transcript_id} "
            f"-> {outcome.id} ({outcome.stage.value})"
        )

    print(f"\nDone! Loaded {loaded} transcripts, {errors} errors.")
    return errors


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("source", help="JSON file or directory of JSON files")
    parser.add_argument("--dry-run", action="store_true", help="validate payloads only")
    parser.add_argument("--max", type=int, default=None)
    args = parser.parse_args()
    sys.exit(1 if load_transcripts(args.source, args.dry_run, args.max) else 0)
