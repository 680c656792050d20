from __future__ import annotations

import numbers
from typing import Any, Dict, List, Optional, Sequence, Union
from uuid import UUID

from mlops.catalogs.validation import require_id, require_name
from mlops.entities import ConfusionMatrix, Metric
from mlops.errors import ValidationError
from mlops.extraction import extract_metrics
from mlops.storage.types import MetadataStore


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def confusion_matrix_from_counts(counts: Any) -> ConfusionMatrix:
    """Build a ``ConfusionMatrix`` from a square count matrix.

    Rows are the actual class and columns the predicted class, as produced
    by ``sklearn.metrics.confusion_matrix``. Numpy arrays are accepted.
    """
    if hasattr(counts, "tolist"):
        counts = counts.tolist()
    try:
        rows = [[float(c) for c in row] for row in counts]
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"confusion matrix counts must be a matrix of numbers: {exc}") from exc

    n = len(rows)
    if n == 0 or any(len(row) != n for row in rows):
        raise ValidationError("confusion matrix counts must be a non-empty square matrix")

    precision = tuple(_ratio(rows[k][k], sum(rows[i][k] for i in range(n))) for k in range(n))
    recall = tuple(_ratio(rows[k][k], sum(rows[k])) for k in range(n))
    return ConfusionMatrix(
        per_class_precision=precision,
        per_class_recall=recall,
        counts=tuple(tuple(row) for row in rows),
        number_of_classes=n,
    )


def _coerce_confusion_matrix(matrix: Any) -> ConfusionMatrix:
    if isinstance(matrix, ConfusionMatrix):
        return matrix
    if all(hasattr(matrix, attr) for attr in ("per_class_precision", "per_class_recall", "counts")):
        counts: Sequence[Sequence[float]] = matrix.counts
        return ConfusionMatrix(
            per_class_precision=tuple(float(p) for p in matrix.per_class_precision),
            per_class_recall=tuple(float(r) for r in matrix.per_class_recall),
            counts=tuple(tuple(float(c) for c in row) for row in counts),
            number_of_classes=int(getattr(matrix, "number_of_classes", len(counts))),
        )
    return confusion_matrix_from_counts(matrix)


class EvaluationCatalog:
    """Record how well a run's model performed."""

    def __init__(self, metadata_store: MetadataStore) -> None:
        self._metadata_store = metadata_store

    def log_metric(self, run_id: Union[UUID, str], metric_name: str, metric_value: float) -> None:
        rid = require_id(run_id)
        require_name(metric_name, "metric name")
        if not isinstance(metric_value, numbers.Real) or isinstance(metric_value, bool):
            raise ValidationError(f"metric {metric_name!r} must be a real number, got {metric_value!r}")
        self._metadata_store.log_metric(rid, metric_name, float(metric_value))

    def log_metrics(self, run_id: Union[UUID, str], metrics: Any) -> Dict[str, float]:
        """
        Log every floating-point metric carried by ``metrics``.

        Parameters:
            run_id: The run to log against.
            metrics: A mapping of metric name to value, or an evaluation
                result object whose float attributes are the metrics.

        Returns:
            The metrics that were logged.
        """
        rid = require_id(run_id)
        if metrics is None:
            raise ValidationError("metrics must not be None")
        selected = extract_metrics(metrics)
        for name, value in selected.items():
            self._metadata_store.log_metric(rid, name, value)
        return selected

    def get_metrics(self, run_id: Union[UUID, str]) -> List[Metric]:
        return self._metadata_store.get_metrics(require_id(run_id))

    def log_confusion_matrix(self, run_id: Union[UUID, str], confusion_matrix: Any) -> ConfusionMatrix:
        """Store the run's confusion matrix, replacing any previous one.

        ``confusion_matrix`` may be a ``ConfusionMatrix``, an object exposing
        ``per_class_precision``/``per_class_recall``/``counts``, or a square
        count matrix.
        """
        rid = require_id(run_id)
        if confusion_matrix is None:
            raise ValidationError("confusion_matrix must not be None")
        matrix = _coerce_confusion_matrix(confusion_matrix)
        self._metadata_store.log_confusion_matrix(rid, matrix)
        return matrix

    def get_confusion_matrix(self, run_id: Union[UUID, str]) -> Optional[ConfusionMatrix]:
        return self._metadata_store.get_confusion_matrix(require_id(run_id))
