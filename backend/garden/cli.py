"""garden-draw — replay recorded strokes, export the artifact, optionally submit.

Stroke file format::

    {
      "device_pixel_ratio": 2,
      "rect": {"left": 0, "top": 0},
      "strokes": [{"color": "#E74C3C", "points": [[10, 10], [60, 80]]}]
    }

Points are client coordinates; ``rect`` is the surface's position in the viewport.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from garden.admission.controller import AdmissionController
from garden.admission.outcome import Accepted
from garden.admission.quota import LocalQuotaCounter
from garden.canvas.export import export
from garden.canvas.surface import BoundingRect, CaptureSurface, Point
from garden.config import settings
from garden.storage.persistence import PersistenceAdapter


def replay(recording: dict[str, Any], ratio: float | None = None) -> CaptureSurface:
    rect = recording.get("rect") or {}
    surface = CaptureSurface(
        device_pixel_ratio=ratio or float(recording.get("device_pixel_ratio", 1.0)),
        rect=BoundingRect(left=float(rect.get("left", 0)), top=float(rect.get("top", 0))),
    )
    surface.initialize()
    for stroke in recording.get("strokes", []):
        points = [Point(float(x), float(y)) for x, y in stroke.get("points", [])]
        if not points:
            continue
        if "color" in stroke:
            surface.color = stroke["color"]
        surface.begin(points[0])
        for p in points[1:]:
            surface.extend(p)
        surface.end()
    return surface


async def _submit(surface: CaptureSurface, identity: str, quota_path: Path) -> int:
    from garden.dependencies import build_resources

    resources = build_resources(settings)
    try:
        controller = AdmissionController(
            resources.classifier,
            PersistenceAdapter(resources.store, settings.premoderated_identities),
            local_counter=LocalQuotaCounter(quota_path),
        )
        outcome = await controller.submit_surface(surface, identity)
    finally:
        await resources.aclose()

    if isinstance(outcome, Accepted):
        print(f"Accepted as {outcome.category.value} ({outcome.confidence:.3f}): {outcome.url}")
    else:
        print(f"Rejected ({outcome.kind.value}): {outcome.detail}")
    if outcome.caption is not None:
        print(outcome.caption.text.strip())
    return 0 if isinstance(outcome, Accepted) else 2


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Replay strokes onto the capture surface")
    parser.add_argument("strokes", help="JSON stroke file")
    parser.add_argument("-o", "--output", help="Write the 224×224 PNG artifact here")
    parser.add_argument("-r", "--ratio", type=float, help="Override device pixel ratio")
    parser.add_argument("-s", "--submit", action="store_true", help="Run the admission pipeline")
    parser.add_argument("--identity", default="local", help="Submitter identity for quota bookkeeping")
    parser.add_argument(
        "--quota-file",
        type=Path,
        default=settings.local_quota_path,
        help="Local fast-path quota counter",
    )
    args = parser.parse_args(argv)

    path = Path(args.strokes)
    if not path.exists():
        print(f"File not found: {path}")
        return 1

    surface = replay(json.loads(path.read_text(encoding="utf-8")), args.ratio)
    artifact = export(surface)
    if artifact is None:
        print("Capture surface not initialized.")
        return 1

    if args.output:
        Path(args.output).write_bytes(artifact.to_png())
        print(f"Wrote {artifact.size[0]}x{artifact.size[1]} artifact → {args.output}")

    if args.submit:
        return asyncio.run(_submit(surface, args.identity, args.quota_file))
    return 0


if __name__ == "__main__":
    sys.exit(main())
