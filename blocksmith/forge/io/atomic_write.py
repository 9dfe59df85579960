# blocksmith/forge/io/atomic_write.py
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


def atomic_write_bytes(path: PathLike, data: bytes) -> Path:
    """
    Replace `path` with `data` so readers never see a half-written export:
      - write a temp file next to the destination
      - fsync it
      - os.replace into place
    """
    dst = Path(path)
    dst.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(dir=str(dst.parent), prefix=dst.name + ".", suffix=".tmp", delete=False) as f:
        tmp_path = Path(f.name)
        try:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        except BaseException:
            f.close()
            tmp_path.unlink(missing_ok=True)
            raise

    os.replace(tmp_path, dst)
    return dst
