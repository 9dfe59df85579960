#!/usr/bin/env python3
# blocksmith/forge/render.py
import argparse
import sys
from pathlib import Path

from blocksmith.forge.api.mock_client import MockTextureGeneratorClient
from blocksmith.forge.errors import ForgeError
from blocksmith.forge.noise.sources import EntropySource
from blocksmith.forge.pipeline.session import ForgeSession, export_filename
from blocksmith.forge.state.procedural_params import RESOLUTIONS
from blocksmith.forge.state.recipe import load_recipe
from blocksmith.paths import texture_output_path


def _make_client(name: str):
    if name == "mock":
        return MockTextureGeneratorClient()
    # imported lazily so the mock path works without credentials
    from blocksmith.forge.api.openai_client import OpenAITextureGeneratorClient

    return OpenAITextureGeneratorClient()


def main(argv=None):
    ap = argparse.ArgumentParser(prog="python -m blocksmith.forge.render")
    ap.add_argument("recipe", nargs="?", default=None, help="Recipe JSON (optional; default is the bare base material)")
    ap.add_argument("output", nargs="?", default=None)  # <- optional
    ap.add_argument("--resolution", type=int, choices=RESOLUTIONS, default=None)
    ap.add_argument("--seed", type=int, default=None, help="Seed the material grain for a reproducible frame")
    ap.add_argument("--generate", metavar="PROMPT", default=None, help="Add a model-generated layer")
    ap.add_argument("--transform", metavar="PROMPT", default=None, help="Add a model-edited copy of the frame")
    ap.add_argument("--client", choices=["mock", "openai"], default="mock")
    ap.add_argument("--timeout", type=float, default=None)
    args = ap.parse_args(argv)

    noise = EntropySource(args.seed)

    try:
        if args.recipe is not None:
            session = load_recipe(args.recipe, noise=noise)
            if args.resolution is not None:
                session.set_resolution(args.resolution)
        else:
            session = ForgeSession(resolution=args.resolution or 16, noise=noise)

        with session:
            if args.generate or args.transform:
                client = _make_client(args.client)
                if args.transform:
                    layer = session.ai_transform(args.transform, client=client, timeout=args.timeout)
                    print(f"Transform: {'added ' + layer.name if layer else 'no change'}")
                if args.generate:
                    layer = session.ai_generate(args.generate, client=client, timeout=args.timeout)
                    print(f"Generate: {'added ' + layer.name if layer else 'no change'}")

            if args.output is None:
                out_path = texture_output_path(export_filename(session.resolution))
            else:
                out_path = Path(args.output)

            out = session.write_png(out_path)
    except (ForgeError, ValueError, OSError) as e:
        print(f"error: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    print(f"Saved texture: {out}")
    print(f"Size: {session.resolution}x{session.resolution}, layers: {len(session.layers)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
