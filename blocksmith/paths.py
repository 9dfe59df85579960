from pathlib import Path

# resolve project root assuming this file lives in blocksmith/paths.py
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# rendered textures land here unless the CLI is given an explicit output
OUTPUT_ROOT = PROJECT_ROOT / "outputs"
OUTPUT_TEXTURES = OUTPUT_ROOT / "textures"


def ensure_dirs():
    for d in (OUTPUT_ROOT, OUTPUT_TEXTURES):
        d.mkdir(parents=True, exist_ok=True)


def texture_output_path(filename: str) -> Path:
    """Default export location; creates the output tree on first use."""
    ensure_dirs()
    return OUTPUT_TEXTURES / filename
