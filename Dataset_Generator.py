#!/usr/bin/env python3
"""
Wikipedia Language Dataset Crawler
Crawls random Wikipedia articles in several languages and builds labeled
tab-separated training and test files (label, sentence).
"""

import argparse
import random
import re
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import nltk
import requests
from bs4 import BeautifulSoup
from nltk.tokenize import sent_tokenize
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Label -> Wikipedia language code
LANGUAGES = {
    'German': 'de',
    'English': 'en',
    'French': 'fr',
    'Italian': 'it',
    'Romanian': 'ro',
    'Spanish': 'es',
}

# Wikipedia language code -> Punkt model name
PUNKT_LANGUAGES = {
    'de': 'german',
    'en': 'english',
    'fr': 'french',
    'it': 'italian',
    'es': 'spanish',
}


class WikipediaCrawler:
    """Fetches random Wikipedia articles and extracts clean sentences."""

    def __init__(self, delay: float = 0.5):
        self.delay = delay
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': 'Mozilla/5.0 (Educational Research Bot)'
        })

        # Download required NLTK data
        self._setup_nltk()

    def _setup_nltk(self):
        """Download the sentence tokenizer models if missing."""
        for package in ['punkt', 'punkt_tab']:
            try:
                nltk.data.find(f'tokenizers/{package}')
            except LookupError:
                logger.info(f"Downloading NLTK package: {package}")
                nltk.download(package, quiet=True)

    def random_article_url(self, language_code: str) -> str:
        return f"https://{language_code}.wikipedia.org/wiki/Special:Random"

    def extract_text_from_page(self, url: str) -> str:
        """
        Extract main text content from a Wikipedia page.

        Args:
            url: Wikipedia article URL

        Returns:
            Extracted text content, empty when the page cannot be fetched
        """
        try:
            time.sleep(self.delay)  # Be respectful to Wikipedia servers
            response = self.session.get(url, timeout=10)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Error fetching {url}: {e}")
            return ""

        soup = BeautifulSoup(response.content, 'html.parser')

        content = soup.find('div', {'id': 'mw-content-text'})
        if not content:
            return ""

        for tag in content.find_all(['script', 'style', 'table']):
            tag.decompose()

        paragraphs = content.find_all('p')
        text = ' '.join([p.get_text() for p in paragraphs])

        text = re.sub(r'\[.*?\]', '', text)  # Remove citation numbers
        text = re.sub(r'\s+', ' ', text)

        return text.strip()

    def extract_sentences(self, text: str, language_code: str,
                          min_length: int = 40) -> List[str]:
        """
        Split text into sentences, filtering out short ones.

        Args:
            text: Article text
            language_code: Wikipedia language code of the text
            min_length: Minimum character length for sentences

        Returns:
            List of valid sentences, free of tabs and line breaks
        """
        punkt_language = PUNKT_LANGUAGES.get(language_code, 'english')
        sentences = []

        for sentence in sent_tokenize(text, language=punkt_language):
            sentence = re.sub(r'[\t\r\n]+', ' ', sentence).strip()

            if (len(sentence) >= min_length and
                not sentence.startswith('http') and
                sentence.count(' ') >= 5):  # At least 6 words
                sentences.append(sentence)

        return sentences

    def crawl_language(self, language_code: str, max_sentences: int = 500,
                       max_pages: int = 100) -> List[str]:
        """
        Collect sentences from random articles in one language.

        Args:
            language_code: Wikipedia language code
            max_sentences: Target number of sentences
            max_pages: Maximum pages to fetch

        Returns:
            Up to `max_sentences` unique sentences
        """
        logger.info(f"Starting crawl for language: {language_code}")
        url = self.random_article_url(language_code)
        sentences: List[str] = []
        seen = set()

        for page in range(1, max_pages + 1):
            if len(sentences) >= max_sentences:
                break
            logger.info(f"Processing page {page}/{max_pages} ({language_code})")
            text = self.extract_text_from_page(url)
            if not text:
                continue
            for sentence in self.extract_sentences(text, language_code):
                if sentence not in seen:
                    seen.add(sentence)
                    sentences.append(sentence)

        logger.info(f"Collected {len(sentences)} sentences for {language_code}")
        return sentences[:max_sentences]


def split_sentences(sentences: List[str], test_fraction: float,
                    rng: random.Random) -> Tuple[List[str], List[str]]:
    """Shuffle and split sentences into training and test parts."""
    shuffled = list(sentences)
    rng.shuffle(shuffled)
    test_size = int(round(len(shuffled) * test_fraction))
    return shuffled[test_size:], shuffled[:test_size]


def write_tsv(rows: List[Tuple[str, str]], output_file: Path):
    output_file.parent.mkdir(parents=True, exist_ok=True)
    # Unquoted, so sentences must not contain tabs or line breaks
    with open(output_file, 'w', newline='', encoding='utf-8') as f:
        for label, sentence in rows:
            f.write(f"{label}\t{sentence}\n")


def create_dataset(languages: Dict[str, str],
                   training_file: str = 'Data/training.tsv',
                   test_file: str = 'Data/test.tsv',
                   sentences_per_language: int = 500,
                   test_fraction: float = 0.2,
                   seed: int = 42,
                   crawler: Optional[WikipediaCrawler] = None) -> Dict[str, Tuple[int, int]]:
    """
    Create labeled training and test files from Wikipedia.

    Args:
        languages: Dictionary mapping labels to Wikipedia language codes
        training_file: Output training TSV path
        test_file: Output test TSV path
        sentences_per_language: Sentences to collect per language
        test_fraction: Share of each language's sentences kept for testing
        seed: Shuffle seed
        crawler: Crawler to use, a new one by default

    Returns:
        Mapping of label to (training rows, test rows)
    """
    if not 0.0 <= test_fraction < 1.0:
        raise ValueError("test_fraction must be in [0, 1)")

    crawler = crawler or WikipediaCrawler()
    rng = random.Random(seed)
    training_rows: List[Tuple[str, str]] = []
    test_rows: List[Tuple[str, str]] = []
    counts: Dict[str, Tuple[int, int]] = {}

    for label, code in languages.items():
        logger.info(f"{'='*60}")
        logger.info(f"Processing language: {label} ({code})")
        logger.info(f"{'='*60}")

        sentences = crawler.crawl_language(code, max_sentences=sentences_per_language)
        train_part, test_part = split_sentences(sentences, test_fraction, rng)
        training_rows.extend((label, sentence) for sentence in train_part)
        test_rows.extend((label, sentence) for sentence in test_part)
        counts[label] = (len(train_part), len(test_part))

    rng.shuffle(training_rows)
    rng.shuffle(test_rows)

    logger.info(f"Saving dataset to {training_file} and {test_file}")
    write_tsv(training_rows, Path(training_file))
    write_tsv(test_rows, Path(test_file))

    # Print statistics
    print("\n" + "="*60)
    print("DATASET STATISTICS")
    print("="*60)
    for label, (train_count, test_count) in counts.items():
        print(f"{label}: {train_count} training, {test_count} test sentences")
    print(f"\nTotal sentences: {len(training_rows) + len(test_rows)}")
    print("="*60)

    return counts


def main(argv: Optional[List[str]] = None):
    """Main execution function."""
    parser = argparse.ArgumentParser(description="Build language detection data files from Wikipedia")
    parser.add_argument('--training-file', default='Data/training.tsv')
    parser.add_argument('--test-file', default='Data/test.tsv')
    parser.add_argument('--sentences', type=int, default=500,
                        help="Sentences per language")
    parser.add_argument('--test-fraction', type=float, default=0.2)
    parser.add_argument('--seed', type=int, default=42)
    args = parser.parse_args(argv)

    create_dataset(
        LANGUAGES,
        training_file=args.training_file,
        test_file=args.test_file,
        sentences_per_language=args.sentences,
        test_fraction=args.test_fraction,
        seed=args.seed,
    )

    logger.info("Dataset creation complete!")


if __name__ == '__main__':
    main()
