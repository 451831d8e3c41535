import re

from ribbon.features.links.utils.slug_generator import generate_slug, generate_suffix


def test_slug_is_eight_url_safe_characters():
    for _ in range(200):
        slug = generate_slug()
        assert re.fullmatch(r"[A-Za-z0-9_-]{8}", slug)


def test_slugs_are_independent():
    slugs = {generate_slug() for _ in range(500)}
    assert len(slugs) == 500


def test_suffix_is_lowercase_alphanumeric():
    assert re.fullmatch(r"[a-z0-9]{6}", generate_suffix())
