"""
Text and JSON renderings of a clustering result.
"""

import json
from typing import Any, Dict, Sequence

from .clustering import ClusterResult


def rgb_to_hex(rgb: Sequence[int]) -> str:
    """Convert an RGB triple to a lowercase #rrggbb string."""
    r, g, b = [int(x) for x in rgb]
    return f"#{r:02x}{g:02x}{b:02x}"


def format_text(result: ClusterResult) -> str:
    lines = ["Dominant colours (sorted by prevalence):"]
    for colour in result:
        r, g, b = colour.rgb
        lines.append(f"RGB: ({r}, {g}, {b}) - {colour.weight * 100:.1f}% of image")
    return "\n".join(lines)


def to_json_dict(result: ClusterResult) -> Dict[str, Any]:
    """Build the JSON document: {"colours": [{"rgb", "percentage", "hex"}, ...]}."""
    return {
        "colours": [
            {
                "rgb": list(colour.rgb),
                "percentage": colour.weight * 100,
                "hex": rgb_to_hex(colour.rgb),
            }
            for colour in result
        ]
    }


def format_json(result: ClusterResult) -> str:
    return json.dumps(to_json_dict(result), indent=2)
