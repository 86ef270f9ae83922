#!/usr/bin/env python3
"""
Language Detection - training driver.
Trains the classifier on the training file, saves the model and reports
quality metrics against the test file.
"""

import argparse
import logging
import math
from typing import List, Optional

from Classifier import LanguageModel
from Models import ClassifierConfig, ClassifierError, MetricsSummary, wait_for_key

logger = logging.getLogger(__name__)


def train(config: ClassifierConfig) -> LanguageModel:
    """Train on `config.training_path` and write the model to `config.model_path`."""
    print("Training Data Set")
    print("-----------------")
    model = LanguageModel.train(
        config.training_path,
        config.model_path,
        class_names=config.class_names,
        has_header=config.has_header,
    )
    print(f"Classes: {', '.join(model.class_names)}")
    return model


def evaluate(model: LanguageModel, config: ClassifierConfig) -> MetricsSummary:
    """Evaluate `model` against `config.test_path` and print the metrics."""
    print()
    print("Evaluating Training Results")
    print("---------------------------")
    metrics = model.evaluate(config.test_path, top_k=config.top_k, has_header=config.has_header)
    print_metrics(metrics)
    return metrics


def print_metrics(metrics: MetricsSummary):
    print()
    print("PredictionModel quality metrics evaluation")
    print("------------------------------------------")
    print(f"  Accuracy Macro: {metrics.accuracy_macro:.2%}")
    print(f"  Accuracy Micro: {metrics.accuracy_micro:.2%}")
    print(f"   Top {metrics.top_k} Accuracy: {metrics.top_k_accuracy:.2%}")
    print(f"         LogLoss: {metrics.log_loss:.2%}")
    print()
    print(" PerClassLogLoss:")
    for index, (name, loss) in enumerate(zip(metrics.class_names, metrics.per_class_log_loss)):
        value = "n/a" if math.isnan(loss) else f"{loss:.2%}"
        print(f"       Class: {index}-{name} - {value}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    defaults = ClassifierConfig()
    parser = argparse.ArgumentParser(
        description="Train the language detection model and evaluate it",
    )
    parser.add_argument("--training-path", default=str(defaults.training_path),
                        help="Tab-separated training file (label, text)")
    parser.add_argument("--test-path", default=str(defaults.test_path),
                        help="Tab-separated test file (label, text)")
    parser.add_argument("--model-path", default=str(defaults.model_path),
                        help="Where to write the trained model")
    parser.add_argument("--class-names", default=None,
                        help="Comma-separated label order (default: order of first appearance)")
    parser.add_argument("--top-k", type=int, default=defaults.top_k,
                        help="Rank cut-off for top-k accuracy")
    parser.add_argument("--has-header", action="store_true",
                        help="Data files start with a header row")
    parser.add_argument("--no-wait", action="store_true",
                        help="Exit without waiting for Enter")
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> ClassifierConfig:
    return ClassifierConfig.from_dict({
        "training_path": args.training_path,
        "test_path": args.test_path,
        "model_path": args.model_path,
        "class_names": args.class_names,
        "top_k": args.top_k,
        "has_header": args.has_header,
    })


def main(argv: Optional[List[str]] = None):
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    args = parse_args(argv)
    try:
        config = config_from_args(args)
        model = train(config)
        evaluate(model, config)
    except ClassifierError as e:
        logger.error(f"Training failed: {e}")
        raise SystemExit(1)

    if not args.no_wait:
        wait_for_key()


if __name__ == "__main__":
    main()
