# utils.py
import json
import os
from pathlib import Path

import numpy as np


def normalize_vectors(v: np.ndarray):
    """
    Normalize rows of v to unit length (for cosine similarity using inner product).
    Returns a C-contiguous float32 array, which is what faiss accepts.
    """
    v = np.asarray(v, dtype="float32")
    norms = np.linalg.norm(v, axis=1, keepdims=True)
    norms[norms == 0] = 1.0
    return np.ascontiguousarray(v / norms, dtype="float32")


def save_json(obj, path):
    """Write JSON to <path>.tmp, then swap it into place so readers never see half a file."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(p.suffix + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)
    os.replace(tmp, p)


def load_json(path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
