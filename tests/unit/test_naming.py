import random

from kvsamples.naming import SAMPLE_VAULT_PATTERN, NameGenerator, is_sample_vault_name


def test_same_seed_gives_same_names():
    first = NameGenerator(random.Random(42))
    second = NameGenerator(random.Random(42))

    assert [first.name("vault") for _ in range(5)] == [second.name("vault") for _ in range(5)]


def test_vault_names_match_sample_pattern_and_length_limit():
    names = NameGenerator(random.Random(7))

    for _ in range(200):
        name = names.name("vault")
        assert SAMPLE_VAULT_PATTERN.fullmatch(name), name
        assert len(name) <= 23


def test_short_names_get_numeric_suffix():
    class FixedRandom(random.Random):
        def choice(self, seq):
            return "odd" if "odd" in seq else "act"

    name = NameGenerator(FixedRandom(0)).name("key")

    # "key-odd-act" is 11 characters, so 5 digits are appended
    assert name.startswith("key-odd-act-")
    suffix = name.rsplit("-", 1)[1]
    assert len(suffix) == 5 and suffix.isdigit()


def test_suffix_shrinks_to_fit():
    class FixedRandom(random.Random):
        def choice(self, seq):
            return "kosher" if "kosher" in seq else "abroad"

    # "vault-kosher-abroad" is 19 characters: room for 3 digits
    name = NameGenerator(FixedRandom(0)).name("vault")
    assert len(name) == 23
    assert len(name.rsplit("-", 1)[1]) == 3


def test_long_names_get_no_suffix():
    class FixedRandom(random.Random):
        def choice(self, seq):
            return "kosher" if "kosher" in seq else "abroad"

    assert NameGenerator(FixedRandom(0)).name("certificate") == "certificate-kosher-abroad"


def test_storage_account_name_has_no_dashes():
    name = NameGenerator(random.Random(3)).storage_account_name()

    assert name.startswith("storacct")
    assert "-" not in name


def test_is_sample_vault_name():
    assert is_sample_vault_name("vault-able-act-123")
    assert not is_sample_vault_name("production-vault")
    assert not is_sample_vault_name("vault-able-act")
