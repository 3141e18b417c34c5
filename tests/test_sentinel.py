from unittest.mock import patch

from coreason_repl.sentinel import SENTINEL_PREFIX, SentinelScanner, make_sentinel


def test_sentinel_composition() -> None:
    with patch("coreason_repl.sentinel.random.random", return_value=0.25), patch(
        "coreason_repl.sentinel.time.time", return_value=1700000000.5
    ):
        sentinel = make_sentinel("print(1)")
    assert sentinel == f"{SENTINEL_PREFIX}0.25_1700000000500_8"


def test_sentinels_differ_between_jobs() -> None:
    sentinels = {make_sentinel("x") for _ in range(100)}
    assert len(sentinels) == 100


def test_chunk_without_sentinel_is_forwarded() -> None:
    scanner = SentinelScanner("SIGIL_BLOCK_DONE0.5_1_3")
    assert scanner.feed("hello\n") == ("hello\n", False)
    assert not scanner.found


def test_trailing_sentinel_is_stripped() -> None:
    sentinel = "SIGIL_BLOCK_DONE0.5_1_3"
    scanner = SentinelScanner(sentinel)
    assert scanner.feed(f"result\n{sentinel}") == ("result\n", True)
    assert scanner.found


def test_sentinel_alone() -> None:
    sentinel = "SIGIL_BLOCK_DONE0.5_1_3"
    scanner = SentinelScanner(sentinel)
    assert scanner.feed(sentinel) == ("", True)


def test_sentinel_split_across_chunks() -> None:
    sentinel = "SIGIL_BLOCK_DONE0.5_1_3"
    scanner = SentinelScanner(sentinel)

    text, done = scanner.feed("out" + sentinel[:7])
    assert (text, done) == ("out", False)

    text, done = scanner.feed(sentinel[7:])
    assert (text, done) == ("", True)


def test_false_prefix_is_released_on_next_chunk() -> None:
    scanner = SentinelScanner("SIGIL_BLOCK_DONE0.5_1_3")

    assert scanner.feed("TESTS") == ("TEST", False)
    assert scanner.feed(" passed\n") == ("S passed\n", False)


def test_sentinel_in_the_middle_does_not_match() -> None:
    sentinel = "SIGIL_BLOCK_DONE0.5_1_3"
    scanner = SentinelScanner(sentinel)
    assert scanner.feed(f"{sentinel} and more") == (f"{sentinel} and more", False)


def test_flush_releases_held_text() -> None:
    scanner = SentinelScanner("SIGIL_BLOCK_DONE0.5_1_3")
    scanner.feed("abcSIG")
    assert scanner.flush() == "SIG"
    assert scanner.flush() == ""


def test_feed_after_match_is_ignored() -> None:
    sentinel = "SIGIL_BLOCK_DONE0.5_1_3"
    scanner = SentinelScanner(sentinel)
    scanner.feed(sentinel)
    assert scanner.feed("late noise") == ("", True)


def test_single_character_split_is_detected() -> None:
    sentinel = "SIGIL_BLOCK_DONE0.5_1_3"
    scanner = SentinelScanner(sentinel)

    # A prompt ending in "S" waits for the next chunk
    assert scanner.feed("Name? S") == ("Name? ", False)
    assert scanner.feed("mith\n") == ("Smith\n", False)

    scanner = SentinelScanner(sentinel)
    assert scanner.feed("done\nS") == ("done\n", False)
    assert scanner.feed(sentinel[1:]) == ("", True)
