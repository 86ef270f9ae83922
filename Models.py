#!/usr/bin/env python3
"""
Language Detection - shared data model, configuration and errors.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


class ClassifierError(Exception):
    """Base exception for language classifier errors."""
    pass


class DataSchemaError(ClassifierError):
    """Raised when a training or test file is missing, empty or malformed."""
    pass


class ModelLoadError(ClassifierError):
    """Raised when a model artifact is missing, corrupt or incompatible."""
    pass


class InternalConsistencyError(ClassifierError):
    """Raised when a loaded model has no usable label vocabulary."""
    pass


class ConfigurationError(ClassifierError):
    """Raised when configuration is invalid."""
    pass


@dataclass(frozen=True)
class ClassificationRecord:
    """One input example. The label is only present in training/test data."""
    text: str
    label: Optional[str] = None


@dataclass(frozen=True)
class ClassPrediction:
    """Predicted class plus the score of every class in vocabulary order."""
    class_index: int
    label: str
    scores: Tuple[float, ...] = ()

    def top_scores(self, class_names: List[str], k: int = 3) -> List[Tuple[str, float]]:
        """Return the k best (label, score) pairs, highest first."""
        ranked = sorted(
            zip(class_names, self.scores), key=lambda pair: pair[1], reverse=True
        )
        return ranked[:k]


@dataclass(frozen=True)
class MetricsSummary:
    """Aggregate quality metrics of one evaluation run."""
    accuracy_macro: float
    accuracy_micro: float
    top_k: int
    top_k_accuracy: float
    log_loss: float
    per_class_log_loss: Tuple[float, ...]
    class_names: Tuple[str, ...]
    num_examples: int


@dataclass
class ClassifierConfig:
    """Paths and options shared by the training and prediction drivers."""
    training_path: Path = Path("Data") / "training.tsv"
    test_path: Path = Path("Data") / "test.tsv"
    model_path: Path = Path("Data") / "Model.zip"
    # Training-time vocabulary order only; predictions use the artifact's names.
    class_names: Optional[List[str]] = None
    top_k: int = 3
    has_header: bool = False

    def __post_init__(self):
        self.training_path = Path(self.training_path)
        self.test_path = Path(self.test_path)
        self.model_path = Path(self.model_path)
        if self.top_k < 1:
            raise ConfigurationError(f"top_k must be at least 1, got {self.top_k}")
        if self.class_names is not None:
            names = [name.strip() for name in self.class_names]
            if not names or any(not name for name in names):
                raise ConfigurationError("class_names cannot contain empty names")
            if len(set(names)) != len(names):
                raise ConfigurationError("class_names cannot contain duplicates")
            self.class_names = names

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClassifierConfig":
        """Create from a mapping of option names to values."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration options: {', '.join(unknown)}")
        kwargs = dict(data)
        if isinstance(kwargs.get("class_names"), str):
            kwargs["class_names"] = [
                name for name in kwargs["class_names"].split(",") if name.strip()
            ]
        return cls(**kwargs)


def wait_for_key(message: str = "Press Enter to end program..."):
    """Block until Enter is pressed or input ends."""
    try:
        input(message)
    except EOFError:
        pass
