from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from numbers import Real
from pathlib import Path
from typing import Any, Dict, Final, List, Union

import numpy as np

from config.matching import DESCRIPTOR_LEN, LABEL_PATTERN
from PoseMatching.errors import InvalidLabel, LengthMismatch

# --- TYPES ---
SampleStore = Dict[str, List[List[float]]]
ReferenceSet = Dict[str, List[float]]

_LABEL_RE: Final[re.Pattern[str]] = re.compile(LABEL_PATTERN)


def validate_label(label: Any) -> str:
    """Returns the label unchanged if it is a single uppercase letter A-Z."""
    if not isinstance(label, str) or _LABEL_RE.fullmatch(label) is None:
        raise InvalidLabel(f"Label must be a single letter A-Z, got {label!r}")
    return label


def _validate_descriptor(descriptor: Any) -> List[float]:
    if isinstance(descriptor, np.ndarray):
        descriptor = descriptor.tolist()
    if isinstance(descriptor, (str, bytes)) or not isinstance(descriptor, Sequence):
        raise ValueError(f"Descriptor must be a sequence of numbers, got {type(descriptor).__name__}")
    if any(isinstance(v, bool) or not isinstance(v, Real) for v in descriptor):
        raise ValueError("Descriptor values must all be numbers")
    if len(descriptor) != DESCRIPTOR_LEN:
        raise LengthMismatch(
            f"Descriptor must have {DESCRIPTOR_LEN} values, got {len(descriptor)}"
        )
    return [float(v) for v in descriptor]


# --- AGGREGATION ---

def record_sample(store: SampleStore, label: str, descriptor: Sequence[float]) -> None:
    """Appends a copy of `descriptor` to the samples recorded under `label`."""
    validate_label(label)
    sample = _validate_descriptor(descriptor)
    store.setdefault(label, []).append(sample)


def build_reference_set(store: Mapping[str, Sequence[Sequence[float]]]) -> ReferenceSet:
    """Reduces every label's samples to their element-wise mean."""
    reference_set: ReferenceSet = {}

    for label, samples in store.items():
        if not samples:
            continue
        if len({len(s) for s in samples}) != 1:
            raise LengthMismatch(f"Samples for {label!r} have differing lengths")

        reference_set[label] = np.mean(np.asarray(samples, dtype=float), axis=0).tolist()

    return reference_set


# --- JSON I/O ---

def save_reference_set(reference_set: Mapping[str, Sequence[float]], path: Union[str, Path]) -> Path:
    """Writes the reference set as a JSON object of label -> 63 numbers."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {label: [float(v) for v in reference_set[label]] for label in sorted(reference_set)}

    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    return out_path


def load_reference_set(path: Union[str, Path]) -> ReferenceSet:
    """Loads and validates a reference set written by `save_reference_set`."""
    in_path = Path(path)
    if not in_path.exists():
        raise FileNotFoundError(f"Reference set not found: {in_path}")

    with open(in_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Reference set must be a JSON object, got {type(data).__name__}")

    return {validate_label(label): _validate_descriptor(values) for label, values in data.items()}


__all__ = [
    "SampleStore",
    "ReferenceSet",
    "validate_label",
    "record_sample",
    "build_reference_set",
    "save_reference_set",
    "load_reference_set",
]
