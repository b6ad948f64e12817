import glob
import logging
import os
from typing import Any, Dict, List, Optional

import pandas as pd

from .models import Difficulty, WordPair

logger = logging.getLogger("wordmatch")

BUILTIN_WORDS: List[Dict[str, str]] = [
    {"en": "Apple", "zh": "苹果"},
    {"en": "Banana", "zh": "香蕉"},
    {"en": "Computer", "zh": "电脑"},
    {"en": "Science", "zh": "科学"},
    {"en": "Nature", "zh": "自然"},
    {"en": "Library", "zh": "图书馆"},
    {"en": "Pencil", "zh": "铅笔"},
    {"en": "Mountain", "zh": "山脉"},
]
DEFAULT_EXPLANATION = "A common word."


def _parse_difficulty(value: Any) -> Optional[Difficulty]:
    """Accepts a member name ("primary") or a label ("小学英语")."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    try:
        return Difficulty[value.upper()]
    except KeyError:
        pass
    try:
        return Difficulty(value)
    except ValueError:
        return None


class VocabularyManager:
    """Holds the offline word lists used when the word pair provider fails.

    Every difficulty falls back to the built-in list unless a CSV file in
    ``directory`` supplies words for it.
    """

    def __init__(self, directory: str):
        self.directory = directory
        self.word_lists: Dict[Difficulty, List[Dict[str, str]]] = {}

    def load_all(self):
        self.word_lists = {}
        if not os.path.isdir(self.directory):
            logger.info(
                f"Vocabulary directory {self.directory} not found. "
                "Using the built-in fallback list."
            )
            return

        for file_path in sorted(glob.glob(os.path.join(self.directory, "*.csv"))):
            try:
                self._load_file(file_path)
            except Exception as e:
                logger.error(f"Failed to load {file_path}: {e}")

    def _load_file(self, file_path: str):
        file_name = os.path.splitext(os.path.basename(file_path))[0]
        df = pd.read_csv(file_path, encoding="utf-8", dtype=str)
        if "en" not in df.columns or "zh" not in df.columns:
            logger.error(f"Skipping {file_name}: Missing columns.")
            return

        df = df.dropna(subset=["en", "zh"]).copy()
        df["en"] = df["en"].str.strip()
        df["zh"] = df["zh"].str.strip()
        df = df[(df["en"] != "") & (df["zh"] != "")].copy()
        if "explanation" not in df.columns:
            df["explanation"] = DEFAULT_EXPLANATION
        df["explanation"] = df["explanation"].fillna(DEFAULT_EXPLANATION)

        if "difficulty" in df.columns:
            groups = [
                (_parse_difficulty(label), group)
                for label, group in df.groupby("difficulty", sort=False)
            ]
        else:
            groups = [(_parse_difficulty(file_name), df)]

        for difficulty, group in groups:
            if difficulty is None:
                logger.error(f"Skipping rows in {file_name}: Unknown difficulty.")
                continue
            records = group[["en", "zh", "explanation"]].to_dict("records")
            self.word_lists.setdefault(difficulty, []).extend(records)
            logger.info(
                f"Loaded {len(records)} words for {difficulty.name} from {file_name}"
            )

    def get_words(self, difficulty: Difficulty) -> List[Dict[str, str]]:
        return self.word_lists.get(difficulty) or BUILTIN_WORDS

    def fallback_pairs(self, difficulty: Difficulty, count: int) -> List[WordPair]:
        """Returns exactly ``count`` pairs, cycling through the word list."""
        words = self.get_words(difficulty)
        pairs = []
        for i in range(count):
            item = words[i % len(words)]
            pairs.append(
                WordPair(
                    id=f"fallback-{i}",
                    en=item["en"],
                    zh=item["zh"],
                    explanation=item.get("explanation") or DEFAULT_EXPLANATION,
                )
            )
        return pairs

    def get_difficulties(self) -> List[Dict[str, Any]]:
        return [
            {
                "id": difficulty.name.lower(),
                "label": difficulty.value,
                "words": len(self.get_words(difficulty)),
            }
            for difficulty in Difficulty
        ]
