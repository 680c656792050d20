"""Turn metric and hyperparameter sources into explicit name -> value mappings.

Callers should prefer passing a plain mapping they built themselves. Any
other object (a dataclass, a pydantic model, a framework's result object)
is adapted by reading its public, non-callable attributes:

- metrics keep floating-point values only (``float``, numpy floating);
  integers, booleans and strings are skipped;
- hyperparameters keep real numbers, integers included, rendered with
  ``str()``; booleans and strings are skipped.

Mappings are taken as the caller's explicit selection: any real number is
a metric, and any scalar (``str``, ``int``, ``float``, ``bool``) is a
hyperparameter.
"""
from __future__ import annotations

import dataclasses
import logging
import numbers
from typing import Any, Dict, Iterator, Mapping, Tuple

logger = logging.getLogger(__name__)


def _is_float(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, numbers.Integral)


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, bool)) or _is_number(value)


def public_fields(source: Any) -> Iterator[Tuple[str, Any]]:
    """Yield ``(name, value)`` for the public data attributes of ``source``."""
    if dataclasses.is_dataclass(source) and not isinstance(source, type):
        for f in dataclasses.fields(source):
            if not f.name.startswith("_"):
                yield f.name, getattr(source, f.name)
        return

    if hasattr(source, "model_dump") and callable(source.model_dump):
        # pydantic v2 models
        yield from source.model_dump().items()
        return

    for name in dir(source):
        if name.startswith("_"):
            continue
        try:
            value = getattr(source, name)
        except Exception as exc:
            # properties computed on demand may fail for this particular result
            logger.debug("Skipping attribute %r of %s: %r", name, type(source).__name__, exc)
            continue
        if callable(value):
            continue
        yield name, value


def extract_metrics(source: Any) -> Dict[str, float]:
    """Return the metrics carried by ``source`` as ``{name: float}``."""
    if isinstance(source, Mapping):
        return {str(k): float(v) for k, v in source.items() if _is_number(v)}
    return {name: float(value) for name, value in public_fields(source) if _is_float(value)}


def extract_hyper_parameters(source: Any) -> Dict[str, str]:
    """Return the hyperparameters carried by ``source`` as ``{name: text}``."""
    if isinstance(source, Mapping):
        return {str(k): str(v) for k, v in source.items() if _is_scalar(v)}
    return {name: str(value) for name, value in public_fields(source) if _is_number(value)}
