#!/usr/bin/env python3
"""
Language Detection - prediction driver.
Loads a trained model, classifies a few sample sentences and then keeps
classifying console input until an empty line is entered.
"""

import argparse
import logging
from typing import Callable, Iterable, List, Optional

from Classifier import LanguageModel, load_or_reuse
from Models import ClassificationRecord, ClassifierConfig, ClassifierError, wait_for_key

logger = logging.getLogger(__name__)

PREVIEW_LIMIT = 80
PREVIEW_KEEP = 75

SAMPLE_RECORDS = [
    ClassificationRecord(text="Hi there, this is Dirk speaking."),
    ClassificationRecord(text="Hallo, mein Name ist Dirk."),
    ClassificationRecord(text="Hola, mi nombre es Dirk."),
    ClassificationRecord(text="Ciao, mi chiamo Dirk."),
    ClassificationRecord(text="Bună ziua, numele meu este Dirk."),
    ClassificationRecord(text="Bonjour, je m'appelle Dirk."),
]


def preview_text(text: str) -> str:
    """Shorten long texts for display."""
    if len(text) > PREVIEW_LIMIT:
        return text[:PREVIEW_KEEP] + "..."
    return text


def predict_and_report(model_path, records: Iterable[ClassificationRecord],
                       model: Optional[LanguageModel] = None,
                       show_scores: bool = True) -> LanguageModel:
    """
    Classify records and print one line per prediction.

    The model is loaded from `model_path` unless one is passed in, and is
    returned so later calls can reuse it.
    """
    model = load_or_reuse(model_path, model)
    records = list(records)
    predictions = model.predict(records)

    print()
    print("Classification Predictions")
    print("--------------------------")
    for record, prediction in zip(records, predictions):
        print(f"Prediction: {prediction.class_index}-{prediction.label} | "
              f"Test: '{preview_text(record.text)}'")
        if show_scores:
            for name, score in zip(model.class_names, prediction.scores):
                print(f"    {name}: {score:.2%}")
    print()

    return model


def interactive_mode(model_path, model: Optional[LanguageModel] = None,
                     read_line: Optional[Callable[[], str]] = None,
                     show_scores: bool = True) -> int:
    """
    Classify console lines until an empty one is read.

    Returns:
        Number of lines classified
    """
    read_line = read_line or input
    print("Please enter another string to classify or just <Enter> to exit the program.")
    classified = 0
    while True:
        try:
            text = read_line()
        except EOFError:
            text = ""
        if not text:
            break

        model = predict_and_report(
            model_path, [ClassificationRecord(text=text)], model, show_scores=show_scores
        )
        classified += 1

    return classified


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    defaults = ClassifierConfig()
    parser = argparse.ArgumentParser(
        description="Classify sentences with a trained language detection model",
    )
    parser.add_argument("--model-path", default=str(defaults.model_path),
                        help="Trained model file")
    parser.add_argument("--no-scores", action="store_true",
                        help="Only print the predicted class")
    parser.add_argument("--no-wait", action="store_true",
                        help="Exit without waiting for Enter")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    args = parse_args(argv)
    show_scores = not args.no_scores
    try:
        config = ClassifierConfig(model_path=args.model_path)
        model = predict_and_report(config.model_path, SAMPLE_RECORDS, show_scores=show_scores)
        print()
        interactive_mode(config.model_path, model, show_scores=show_scores)
    except ClassifierError as e:
        logger.error(f"Prediction failed: {e}")
        raise SystemExit(1)

    if not args.no_wait:
        wait_for_key()


if __name__ == "__main__":
    main()
