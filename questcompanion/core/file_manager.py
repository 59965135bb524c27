from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Union

PathLike = Union[str, Path]


# ---------- JSON utils ----------
def _dumps_pretty(obj: Any) -> str:
    # pretty, multi-line so users can inspect the file by hand
    return json.dumps(obj, ensure_ascii=False, indent=2)


class FileManager:
    @staticmethod
    def read_json(path: PathLike) -> Any:
        """
        Read and parse one UTF-8 JSON document.

        OSError (including FileNotFoundError) and json.JSONDecodeError are left
        to the caller, which decides whether they are fatal.
        """
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    @staticmethod
    def write_json(path: PathLike, data: Any) -> str:
        """
        Write `data` next to the target as `<name>.part`, then move it over the
        target so readers never see a half-written document.
        """
        final = Path(path)
        final.parent.mkdir(parents=True, exist_ok=True)
        tmp_out = final.with_name(final.name + ".part")
        with open(tmp_out, "w", encoding="utf-8") as f:
            f.write(_dumps_pretty(data))
            f.write("\n")
        # atomic-ish move
        os.replace(tmp_out, final)
        return str(final)
