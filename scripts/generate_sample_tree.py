from __future__ import annotations

import argparse
import array
import json
import math
import sys
import wave
from pathlib import Path

SAMPLE_RATE = 22050


def write_wav(path: Path, samples: list[float], sample_rate: int = SAMPLE_RATE) -> None:
    """Write mono 16-bit PCM, clipping samples to [-1, 1]."""
    frames = array.array("h", (int(max(-1.0, min(1.0, s)) * 32767) for s in samples))
    if sys.byteorder == "big":
        frames.byteswap()
    path.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(path), "wb") as out:
        out.setparams((1, 2, sample_rate, len(frames), "NONE", "not compressed"))
        out.writeframes(frames.tobytes())


def decaying_tone(freq: float, duration_s: float = 0.05, decay: float = 30.0) -> list[float]:
    n = int(duration_s * SAMPLE_RATE)
    return [0.6 * math.exp(-decay * i / SAMPLE_RATE) * math.sin(2.0 * math.pi * freq * i / SAMPLE_RATE) for i in range(n)]


def build_tree(root: Path) -> list[dict[str, object]]:
    """Write a small Splice-like folder of samples and return the manifest cases."""
    cases: list[dict[str, object]] = []

    def add(rel: str, freq: float, expected: str, note: str) -> None:
        write_wav(root / rel, decaying_tone(freq))
        cases.append({"path": rel, "expected_destination": expected, "note": note})

    add("packs/Trap Essentials/808_snare_hit.wav", 55.0, "Drums/808/808_snare_hit.wav", "808 wins over snare.")
    add("packs/Trap Essentials/KICK_01.WAV", 60.0, "Drums/Kick/KICK_01.WAV", "Upper-case name and extension.")
    add("packs/Trap Essentials/snare_1.wav", 200.0, "snare_1_0.wav", "Same-run duplicate goes to the root with an index.")
    add("packs/Lofi Kit/snare_1.wav", 210.0, "Drums/Snare/snare_1.wav", "First snare_1.wav (packs are walked in name order).")
    add("packs/Lofi Kit/tight_clp_02.wav", 900.0, "Drums/Clap/tight_clp_02.wav", "Abbreviated clap keyword.")
    add("packs/Lofi Kit/open_hat.wav", 6000.0, "Drums/Hat/open_hat.wav", "Hat keyword.")
    add("packs/Lofi Kit/tom_drm_fill.wav", 120.0, "Drums/Other/tom_drm_fill.wav", "Generic drum keyword.")
    add("packs/Ambient/ambient_loop.wav", 330.0, "Other/Loop/ambient_loop.wav", "Loop precedence over fallback.")
    add("packs/Ambient/texture_swoosh.wav", 440.0, "Other/Other/texture_swoosh.wav", "No keyword: fallback.")

    notes = root / "packs" / "Ambient" / "kick.txt"
    notes.parent.mkdir(parents=True, exist_ok=True)
    notes.write_text("not audio\n", encoding="utf-8")
    cases.append({"path": "packs/Ambient/kick.txt", "expected_destination": None, "note": "Not an audio file."})

    return cases


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a tiny deterministic Splice-like sample tree for demos/tests.")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("examples") / "sample_tree",
        help="Output folder (default: examples/sample_tree)",
    )
    args = parser.parse_args()

    output_root = args.output.resolve()
    output_root.mkdir(parents=True, exist_ok=True)
    cases = build_tree(output_root)

    manifest = {
        "version": 1,
        "description": "Deterministic Splice-like sample tree with expected organizer destinations.",
        "generator": "scripts/generate_sample_tree.py",
        "cases": cases,
    }
    (output_root / "manifest.json").write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    print(f"Generated {len(cases)} files under {output_root}")
    print(f"Wrote manifest: {output_root / 'manifest.json'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
