"""ORM row classes; importing this package registers every table on ``Base.metadata``."""
from mlops.db.poco.confusion_matrix import ConfusionMatrixRow
from mlops.db.poco.data_schema import DataColumnRow, DataSchemaRow
from mlops.db.poco.experiment import ExperimentRow
from mlops.db.poco.hyper_parameter import HyperParameterRow
from mlops.db.poco.metric import MetricRow
from mlops.db.poco.run import RunRow

__all__ = [
    "ConfusionMatrixRow",
    "DataColumnRow",
    "DataSchemaRow",
    "ExperimentRow",
    "HyperParameterRow",
    "MetricRow",
    "RunRow",
]
