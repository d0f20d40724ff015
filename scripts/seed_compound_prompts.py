#!/usr/bin/env python3
"""Seed a small graph of plain and compound prompts into the prompt library.

Usage:
    python scripts/seed_compound_prompts.py
    python scripts/seed_compound_prompts.py --base-url http://localhost:8400
"""

from __future__ import annotations

import argparse
import sys

import httpx

BASE_PROMPTS = {
    "role": ("Role: reviewer", "You are a meticulous code reviewer."),
    "focus": ("Focus: security", "Pay special attention to injection and auth flaws."),
    "format": ("Format: bullets", "Answer as a short bulleted list."),
}


def _post(client: httpx.Client, path: str, payload: dict) -> dict:
    resp = client.post(path, json=payload)
    if resp.status_code != 201:
        print(f"  FAILED {path}: {resp.status_code} {resp.text}", file=sys.stderr)
        sys.exit(1)
    return resp.json()


def seed_via_api(base_url: str) -> None:
    """Create the base prompts, then two compound prompts nested inside each other."""
    with httpx.Client(base_url=base_url, timeout=10.0) as client:
        ids: dict[str, str] = {}
        for key, (title, text) in BASE_PROMPTS.items():
            ids[key] = _post(client, "/api/v1/prompts", {"title": title, "prompt_text": text})["id"]
            print(f"  Created prompt: {title}")

        reviewer = _post(
            client,
            "/api/v1/prompts/compound",
            {
                "title": "Security reviewer",
                "components": [
                    {"position": 0, "component_prompt_id": ids["role"], "custom_text_after": " "},
                    {"position": 1, "component_prompt_id": ids["focus"]},
                ],
            },
        )
        print(f"  Created compound: Security reviewer (depth {reviewer['max_depth']})")

        full = _post(
            client,
            "/api/v1/prompts/compound",
            {
                "title": "Security review, bulleted",
                "components": [
                    {"position": 0, "component_prompt_id": reviewer["id"]},
                    {
                        "position": 1,
                        "custom_text_before": "\n\n",
                        "component_prompt_id": ids["format"],
                    },
                ],
            },
        )
        print(f"  Created compound: Security review, bulleted (depth {full['max_depth']})")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed compound prompts into the prompt library")
    parser.add_argument(
        "--base-url",
        default="http://localhost:8400",
        help="Prompt library API base URL (default: http://localhost:8400)",
    )
    args = parser.parse_args()

    print(f"Seeding prompts to {args.base_url} ...")
    seed_via_api(args.base_url)
    print("Done.")


if __name__ == "__main__":
    main()
