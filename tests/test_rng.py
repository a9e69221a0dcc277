"""Tests for the seeded generator: FNV-1a seed hash and the mulberry32 stream."""

import pytest

from replay_core.rng import (
    FNV_OFFSET_BASIS,
    GeneratorState,
    SeededRandom,
    hash_seed,
    init_generator,
    next_uniform,
)


class TestHashSeed:

    def test_empty_string_is_offset_basis(self) -> None:
        assert hash_seed("") == FNV_OFFSET_BASIS == 2166136261

    @pytest.mark.parametrize("text, expected", [
        ("a", 0xE40C292C),
        ("foobar", 0xBF9CF968),
    ])
    def test_known_values(self, text: str, expected: int) -> None:
        assert hash_seed(text) == expected

    def test_result_is_uint32(self) -> None:
        for text in ("BTL-EURUSD-1", "x" * 500, "ünïcödé"):
            h = hash_seed(text)
            assert 0 <= h <= 0xFFFFFFFF

    def test_non_ascii_hashes_per_code_unit(self) -> None:
        """'é' is one UTF-16 code unit (0xE9): one FNV round, not two."""
        expected = ((FNV_OFFSET_BASIS ^ 0xE9) * 16777619) & 0xFFFFFFFF
        assert hash_seed("é") == expected


class TestNextUniform:

    def test_pure_function(self) -> None:
        state = init_generator("BTL-demo")
        u1, s1 = next_uniform(state)
        u2, s2 = next_uniform(state)
        assert u1 == u2
        assert s1 == s2
        assert state == init_generator("BTL-demo")  # input untouched

    def test_advances_state(self) -> None:
        state = init_generator("BTL-demo")
        _, s1 = next_uniform(state)
        assert s1 != state

    def test_state_wraps_at_32_bits(self) -> None:
        _, s = next_uniform(GeneratorState(0xFFFFFFFF))
        assert s.value == (0xFFFFFFFF + 0x6D2B79F5) & 0xFFFFFFFF

    def test_values_in_unit_interval(self) -> None:
        rng = SeededRandom("BTL-range-check")
        values = [rng.random() for _ in range(5000)]
        assert all(0.0 <= u < 1.0 for u in values)
        # A degenerate stream would fail this loosely.
        assert 0.4 < sum(values) / len(values) < 0.6


class TestSeededRandom:

    def test_same_seed_same_stream(self) -> None:
        a = SeededRandom("BTL-EURUSD-1")
        b = SeededRandom("BTL-EURUSD-1")
        assert [a.random() for _ in range(50)] == [b.random() for _ in range(50)]

    def test_different_seed_different_stream(self) -> None:
        a = SeededRandom("BTL-EURUSD-1")
        b = SeededRandom("BTL-EURUSD-2")
        assert [a.random() for _ in range(10)] != [b.random() for _ in range(10)]

    def test_matches_functional_api(self) -> None:
        rng = SeededRandom("BTL-x")
        state = init_generator("BTL-x")
        for _ in range(10):
            u, state = next_uniform(state)
            assert rng.random() == u
        assert rng.state == state

    def test_iterator(self) -> None:
        rng = SeededRandom("BTL-x")
        first = next(iter(rng))
        assert first == SeededRandom("BTL-x").random()


class TestReferenceStream:
    """Values recorded from the browser version; saved sessions depend on them."""

    def test_seed_hash(self) -> None:
        assert hash_seed("BTL-EURUSD-1") == 2051183174
        assert hash_seed("a") == 3826002220

    def test_astral_seed_hashes_surrogate_pair(self) -> None:
        assert hash_seed("BTL-\U0001F600x") == 3574781111

    def test_first_draws(self) -> None:
        rng = SeededRandom("BTL-EURUSD-1")
        assert [rng.random() for _ in range(3)] == [
            0.3893933114595711,
            0.6568730978760868,
            0.02442838065326214,
        ]

    def test_zero_state(self) -> None:
        u1, state = next_uniform(GeneratorState(0))
        u2, _ = next_uniform(state)
        assert (u1, u2) == (0.26642920868471265, 0.0003297457005828619)
