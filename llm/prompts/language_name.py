from __future__ import annotations

from typing import List


def get_prompt(name: str) -> List[dict]:
    return [
        {
            "role": "user",
            "content": (
                f'Translate the language name "{name}" to its native form (how it is written in that '
                "language). Return only the translated text, nothing else."
            ),
        }
    ]


__all__ = ["get_prompt"]
