import io

import numpy as np
import pytest
from PIL import Image

from blocksmith.forge.noise.sources import EntropySource
from blocksmith.forge.state.procedural_params import BorderSides, ProceduralParams


@pytest.fixture
def quiet_params():
    """
    Base material with no grain and no configurable border.
    Only the fixed 2px vignette is left, so pixel values are exact.
    """
    return ProceduralParams(
        noise_amount=0,
        border_sides=BorderSides(top=False, bottom=False, left=False, right=False),
    )


@pytest.fixture
def seeded_noise():
    return EntropySource(1234)


@pytest.fixture
def png_blob():
    """
    Factory: encode an RGBA pixel grid (or a solid color) as PNG bytes.
    """

    def make(width=4, height=4, color=(10, 20, 30, 255), pixels=None):
        if pixels is not None:
            img = Image.fromarray(np.asarray(pixels, dtype=np.uint8))
        else:
            img = Image.new("RGBA", (width, height), color)
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    return make
