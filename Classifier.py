#!/usr/bin/env python3
"""
Language Detection Classifier
Gradient-boosted trees over word and character n-gram features, trained on
tab-separated label/text files and persisted as a compressed model bundle.
"""

import csv
import gzip
import logging
import pickle
import warnings
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from sklearn.ensemble import GradientBoostingClassifier
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.exceptions import UndefinedMetricWarning
from sklearn.metrics import accuracy_score, log_loss, recall_score, top_k_accuracy_score
from sklearn.pipeline import FeatureUnion, Pipeline

from Models import (
    ClassificationRecord,
    ClassPrediction,
    DataSchemaError,
    InternalConsistencyError,
    MetricsSummary,
    ModelLoadError,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

ARTIFACT_FORMAT_VERSION = 1
COLUMNS = ["label", "text"]


def load_records(path: PathLike, has_header: bool = False) -> List[ClassificationRecord]:
    """
    Read a tab-separated data file into records.

    Each row holds the label in the first column and the text in the second.

    Args:
        path: Training or test file
        has_header: Skip the first row when True

    Returns:
        Records in file order
    """
    path = Path(path)
    if not path.is_file():
        raise DataSchemaError(f"Data file not found: {path}")

    try:
        data = pd.read_csv(
            path,
            sep="\t",
            header=0 if has_header else None,
            dtype=str,
            quoting=csv.QUOTE_NONE,
            keep_default_na=False,
            encoding="utf-8",
        )
    except pd.errors.EmptyDataError as exc:
        raise DataSchemaError(f"Data file is empty: {path}") from exc
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise DataSchemaError(f"Malformed data file {path}: {exc}") from exc

    if data.empty:
        raise DataSchemaError(f"Data file has no records: {path}")
    if data.shape[1] != len(COLUMNS):
        raise DataSchemaError(
            f"Expected {len(COLUMNS)} tab-separated columns (label, text) in {path}, "
            f"found {data.shape[1]}"
        )

    data.columns = COLUMNS
    data = data.fillna("")
    data["label"] = data["label"].str.strip()
    incomplete = data[(data["label"] == "") | (data["text"] == "")]
    if not incomplete.empty:
        first_row = int(incomplete.index[0]) + (2 if has_header else 1)
        raise DataSchemaError(f"Row {first_row} of {path} is missing its label or text")

    return [
        ClassificationRecord(text=text, label=label)
        for label, text in zip(data["label"], data["text"])
    ]


def dictionarize(labels: Sequence[str],
                 class_names: Optional[Sequence[str]] = None) -> Tuple[List[str], np.ndarray]:
    """
    Map label strings to dense class indices.

    Without `class_names` indices follow the order in which labels first
    appear. With `class_names` that list fixes the order, and it must match
    the labels present exactly.
    """
    if class_names is None:
        codes, uniques = pd.factorize(pd.Series(list(labels), dtype=object))
        vocabulary = [str(name) for name in uniques]
    else:
        vocabulary = list(class_names)
        seen = set(labels)
        unknown = sorted(seen - set(vocabulary))
        if unknown:
            raise DataSchemaError(f"Labels not in configured class names: {', '.join(unknown)}")
        missing = [name for name in vocabulary if name not in seen]
        if missing:
            raise DataSchemaError(f"Configured classes without training rows: {', '.join(missing)}")
        index = {name: i for i, name in enumerate(vocabulary)}
        codes = np.array([index[label] for label in labels], dtype=np.int64)

    if len(vocabulary) < 2:
        raise DataSchemaError("Training data needs at least two distinct labels")
    return vocabulary, np.asarray(codes, dtype=np.int64)


def build_pipeline(random_state: int = 0) -> Pipeline:
    """Create the featurization and classification pipeline."""
    return Pipeline([
        ('features', FeatureUnion([
            ('words', TfidfVectorizer(analyzer='word', ngram_range=(1, 2), max_features=5000)),
            ('chars', TfidfVectorizer(analyzer='char_wb', ngram_range=(1, 3), max_features=5000)),
        ])),
        ('classifier', GradientBoostingClassifier(random_state=random_state)),
    ])


class LanguageModel:
    """A trained pipeline bundled with its label vocabulary."""

    def __init__(self, pipeline: Pipeline, class_names: Sequence[str]):
        self.pipeline = pipeline
        self.class_names = list(class_names)
        self._check_vocabulary()

    def _check_vocabulary(self):
        if not self.class_names:
            raise InternalConsistencyError("Model has no label vocabulary")
        classifier = getattr(self.pipeline, 'named_steps', {}).get('classifier')
        classes = getattr(classifier, 'classes_', None)
        if classes is None or len(classes) != len(self.class_names):
            raise InternalConsistencyError(
                f"Label vocabulary has {len(self.class_names)} names but the classifier "
                f"was trained on {0 if classes is None else len(classes)} classes"
            )

    @classmethod
    def train(cls, training_path: PathLike, model_path: Optional[PathLike] = None,
              class_names: Optional[Sequence[str]] = None,
              has_header: bool = False) -> "LanguageModel":
        """
        Train a model on a labeled data file.

        Args:
            training_path: Tab-separated label/text file
            model_path: Where to write the artifact, skipped when None
            class_names: Optional fixed vocabulary order
            has_header: Skip the first row of the data file

        Returns:
            The trained model
        """
        logger.info(f"Loading training data from {training_path}")
        records = load_records(training_path, has_header=has_header)
        vocabulary, codes = dictionarize([record.label for record in records], class_names)
        logger.info(f"Training on {len(records)} records over {len(vocabulary)} classes")

        pipeline = build_pipeline()
        try:
            pipeline.fit([record.text for record in records], codes)
        except ValueError as exc:
            raise DataSchemaError(f"Cannot train on {training_path}: {exc}") from exc

        model = cls(pipeline, vocabulary)
        if model_path is not None:
            model.save(model_path)
        return model

    def save(self, model_path: PathLike):
        """Write the model bundle, replacing any existing file."""
        path = Path(model_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        bundle = {
            'format_version': ARTIFACT_FORMAT_VERSION,
            'pipeline': self.pipeline,
            'class_names': list(self.class_names),
        }
        with gzip.open(path, 'wb') as f:
            pickle.dump(bundle, f, protocol=pickle.HIGHEST_PROTOCOL)
        logger.info(f"Model saved to {path}")

    @classmethod
    def load(cls, model_path: PathLike) -> "LanguageModel":
        """Read a model bundle written by `save`."""
        path = Path(model_path)
        if not path.is_file():
            raise ModelLoadError(f"Model file not found: {path}")

        logger.info(f"Loading model from {path}")
        try:
            with gzip.open(path, 'rb') as f:
                bundle = pickle.load(f)
        except Exception as exc:
            raise ModelLoadError(f"Cannot read model file {path}: {exc}") from exc

        if not isinstance(bundle, dict) or bundle.get('format_version') != ARTIFACT_FORMAT_VERSION:
            raise ModelLoadError(f"Unsupported model format in {path}")
        pipeline = bundle.get('pipeline')
        if not hasattr(pipeline, 'predict_proba'):
            raise ModelLoadError(f"Model file {path} does not contain a trained pipeline")

        return cls(pipeline, bundle.get('class_names') or [])

    def predict(self, records: Iterable[ClassificationRecord]) -> List[ClassPrediction]:
        """Predict one class per record, in input order."""
        records = list(records)
        if not records:
            raise ValueError("At least one record is required for prediction")

        probabilities = self.pipeline.predict_proba([record.text for record in records])
        predictions = []
        for row in probabilities:
            index = int(np.argmax(row))
            predictions.append(ClassPrediction(
                class_index=index,
                label=self.class_names[index],
                scores=tuple(float(score) for score in row),
            ))
        return predictions

    def classify(self, text: str) -> ClassPrediction:
        """Classify a single text."""
        return self.predict([ClassificationRecord(text=text)])[0]

    def evaluate(self, test_path: PathLike, top_k: int = 3,
                 has_header: bool = False) -> MetricsSummary:
        """
        Compute quality metrics against a labeled test file.

        Args:
            test_path: Tab-separated label/text file
            top_k: Rank cut-off for top-k accuracy
            has_header: Skip the first row of the data file

        Returns:
            Aggregated metrics for the whole file
        """
        logger.info(f"Loading test data from {test_path}")
        records = load_records(test_path, has_header=has_header)
        index = {name: i for i, name in enumerate(self.class_names)}
        unknown = sorted({record.label for record in records} - set(index))
        if unknown:
            raise DataSchemaError(f"Test labels unknown to the model: {', '.join(unknown)}")

        y_true = np.array([index[record.label] for record in records], dtype=np.int64)
        probabilities = self.pipeline.predict_proba([record.text for record in records])
        return compute_metrics(y_true, probabilities, self.class_names, top_k=top_k)


def compute_metrics(y_true: np.ndarray, probabilities: np.ndarray,
                    class_names: Sequence[str], top_k: int = 3) -> MetricsSummary:
    """
    Aggregate metrics from true class indices and per-class probabilities.

    Column i of `probabilities` is the score of `class_names[i]`.
    """
    y_true = np.asarray(y_true, dtype=np.int64)
    probabilities = np.asarray(probabilities, dtype=float)
    y_pred = probabilities.argmax(axis=1)
    labels = np.arange(len(class_names))

    recalls = recall_score(y_true, y_pred, labels=np.unique(y_true), average=None, zero_division=0)

    k = min(top_k, len(labels))
    # Two classes take the positive-class column only
    scores = probabilities[:, 1] if len(labels) == 2 else probabilities
    with warnings.catch_warnings():
        # k equal to the class count is a perfect score by definition
        warnings.simplefilter('ignore', UndefinedMetricWarning)
        top_k_accuracy = top_k_accuracy_score(y_true, scores, k=k, labels=labels)

    true_probability = np.clip(probabilities[np.arange(len(y_true)), y_true], 1e-15, 1.0)
    losses = -np.log(true_probability)
    per_class = tuple(
        float(losses[y_true == label].mean()) if np.any(y_true == label) else float('nan')
        for label in labels
    )

    return MetricsSummary(
        accuracy_macro=float(np.mean(recalls)),
        accuracy_micro=float(accuracy_score(y_true, y_pred)),
        top_k=k,
        top_k_accuracy=float(top_k_accuracy),
        log_loss=float(log_loss(y_true, probabilities, labels=labels)),
        per_class_log_loss=per_class,
        class_names=tuple(class_names),
        num_examples=len(y_true),
    )


def load_or_reuse(model_path: PathLike, model: Optional[LanguageModel] = None) -> LanguageModel:
    """Return `model` when given, otherwise load it from `model_path`."""
    if model is not None:
        return model
    return LanguageModel.load(model_path)
