#!/usr/bin/env python3
"""
Example: Modulation and transform presets.

This demonstrates evaluating modulation text at a position, applying
transforms to notes, and loading presets from the library.

Usage:
    python examples/use_presets.py
"""

import random
import tempfile
from pathlib import Path

from chuk_mcp_notation.modulation import EvaluationContext, TransformApplier, evaluate_modulation
from chuk_mcp_notation.notation import format_notation, interpret_barbeat
from chuk_mcp_notation.presets import PresetLoader


def main() -> None:
    """Demonstrate modulation and presets."""
    print("CHUK Notation Modulation Demo")
    print("=" * 40)
    print()

    # One LFO sampled across a bar
    print("velocity += 20 * cos(1:0t):")
    for position in [0, 1, 2, 3]:
        result = evaluate_modulation("velocity += 20 * cos(1:0t)", EvaluationContext(position=position))
        print(f"  beat {position}: {result.to_dict()['velocity']['value']:+.1f}")
    print()

    notes = interpret_barbeat("C3 1|1,2,3,4 2|1,2,3,4").notes

    library_path = Path(__file__).parent.parent / "src/chuk_mcp_notation/presets/library"

    with tempfile.TemporaryDirectory() as tmp:
        loader = PresetLoader(library_path=library_path, project_path=Path(tmp))

        print("Available presets:")
        for meta in loader.list_presets():
            print(f"  {meta.name}: {meta.description[:50]}")
        print()

        for name in ["crescendo", "humanize"]:
            preset = loader.get_preset(name)
            if not preset:
                print(f"Failed to load preset {name}")
                return

            result = TransformApplier(rng=random.Random(7)).apply(notes, preset.transform)
            print(f"{name}:")
            print(f"  {format_notation(result.notes)}")
            for warning in result.warnings()[:2]:
                print(f"  - {warning}")
        print()

        copied_path = loader.copy_to_project("swing-feel")
        if copied_path:
            print(f"Copied swing-feel to: {copied_path}")


if __name__ == "__main__":
    main()
