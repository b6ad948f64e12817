"""Tests for the offline vocabulary lists."""

from wordmatch.models import Difficulty
from wordmatch.vocabulary import BUILTIN_WORDS, VocabularyManager


def test_builtin_list_when_directory_missing(vocabulary):
    assert vocabulary.get_words(Difficulty.COLLEGE) == BUILTIN_WORDS


def test_fallback_cycles_through_list(vocabulary):
    pairs = vocabulary.fallback_pairs(Difficulty.MIDDLE, 10)

    assert len(pairs) == 10
    assert [p.id for p in pairs] == [f"fallback-{i}" for i in range(10)]
    assert (pairs[8].en, pairs[8].zh) == ("Apple", "苹果")
    assert (pairs[9].en, pairs[9].zh) == ("Banana", "香蕉")
    assert all(p.explanation == "A common word." for p in pairs)


def test_fallback_is_deterministic(vocabulary):
    first = vocabulary.fallback_pairs(Difficulty.HIGH, 8)
    second = vocabulary.fallback_pairs(Difficulty.HIGH, 8)
    assert first == second


def test_csv_named_after_difficulty(tmp_path):
    (tmp_path / "primary.csv").write_text(
        "en,zh,explanation\ncat,猫,A pet.\ndog,狗,\n", encoding="utf-8"
    )
    manager = VocabularyManager(str(tmp_path))
    manager.load_all()

    pairs = manager.fallback_pairs(Difficulty.PRIMARY, 3)

    assert [(p.en, p.zh) for p in pairs] == [("cat", "猫"), ("dog", "狗"), ("cat", "猫")]
    assert pairs[0].explanation == "A pet."
    assert pairs[1].explanation == "A common word."
    assert manager.get_words(Difficulty.MIDDLE) == BUILTIN_WORDS


def test_csv_with_difficulty_column(tmp_path):
    (tmp_path / "mixed.csv").write_text(
        "difficulty,en,zh\ncollege,abandon,放弃\n托福/雅思/GRE,ubiquitous,无处不在的\n",
        encoding="utf-8",
    )
    manager = VocabularyManager(str(tmp_path))
    manager.load_all()

    assert manager.fallback_pairs(Difficulty.COLLEGE, 1)[0].en == "abandon"
    assert manager.fallback_pairs(Difficulty.ADVANCED, 1)[0].en == "ubiquitous"


def test_csv_missing_columns_is_skipped(tmp_path):
    (tmp_path / "primary.csv").write_text("word,translation\nHund,dog\n", encoding="utf-8")
    manager = VocabularyManager(str(tmp_path))
    manager.load_all()

    assert manager.get_words(Difficulty.PRIMARY) == BUILTIN_WORDS


def test_get_difficulties_lists_every_tier(vocabulary):
    levels = vocabulary.get_difficulties()

    assert [level["label"] for level in levels] == [d.value for d in Difficulty]
    assert levels[0] == {"id": "primary", "label": "小学英语", "words": 8}


def test_csv_blank_rows_are_dropped(tmp_path):
    (tmp_path / "middle.csv").write_text(
        "en,zh\n   ,苹果\nBanana,香蕉\nCherry,  \n", encoding="utf-8"
    )
    manager = VocabularyManager(str(tmp_path))
    manager.load_all()

    pairs = manager.fallback_pairs(Difficulty.MIDDLE, 8)

    assert len(pairs) == 8
    assert {(p.en, p.zh) for p in pairs} == {("Banana", "香蕉")}


def test_csv_with_only_blank_rows_uses_builtin(tmp_path):
    (tmp_path / "high.csv").write_text("en,zh\n  ,  \n", encoding="utf-8")
    manager = VocabularyManager(str(tmp_path))
    manager.load_all()

    assert manager.get_words(Difficulty.HIGH) == BUILTIN_WORDS
    assert len(manager.fallback_pairs(Difficulty.HIGH, 8)) == 8
