"""Tests for fontalike.core.font_matcher module."""

import pytest

from fontalike.core.feature_extractor import FEATURE_NAMES, extract_features_from_bytes
from fontalike.core.font_catalog import FontCatalog, FontCategory
from fontalike.core.font_matcher import (
    EXACT_SIMILARITY,
    FALLBACK_SIMILARITY,
    NO_CATALOG_MESSAGE,
    OVERRIDE_SIMILARITY,
    FontMatcher,
    MatchMethod,
    MatchResult,
    infer_category,
    specimen_url,
    strip_artifact_suffix,
)
from fontalike.core.name_overrides import NAME_OVERRIDES

from .conftest import make_catalog, make_record, make_vector


def matcher_for(catalog: FontCatalog, **kwargs) -> FontMatcher:
    return FontMatcher(lambda: catalog, **kwargs)


def families(report):
    return [alt.family for alt in report.alternatives]


class TestStripArtifactSuffix:
    @pytest.mark.parametrize(
        "declared, expected",
        [
            ("__Inter_a1b2c3", "Inter"),
            ("Roboto__swap", "Roboto"),
            ("Lato-12345", "Lato"),
            ("Inter_Fallback_0f3e2d", "Inter"),
            ("Inter Fallback", "Inter"),
            ("__Poppins_Fallback_9e8d7c6b", "Poppins"),
            ("Source Sans 3", "Source Sans 3"),
            ("Baloo 2", "Baloo 2"),
            ("Font-abcdef", "Font-abcdef"),
            ("Fira Code", "Fira Code"),
            ("__Inter_Tight_a1b2c3", "Inter Tight"),
        ],
    )
    def test_strip(self, declared: str, expected: str) -> None:
        assert strip_artifact_suffix(declared) == expected


class TestInferCategory:
    @pytest.mark.parametrize(
        "declared, expected",
        [
            ("JetBrains Mono", FontCategory.MONOSPACE),
            ("Consolas", FontCategory.MONOSPACE),
            ("Source Code", FontCategory.MONOSPACE),
            ("PT Serif", FontCategory.SERIF),
            ("Noto Sans Serif", FontCategory.SANS_SERIF),
            ("Open Sans", FontCategory.SANS_SERIF),
            ("Brush Script", FontCategory.HANDWRITING),
            ("Dancing Calligraphy", FontCategory.HANDWRITING),
            ("Lobster", None),
        ],
    )
    def test_keywords(self, declared: str, expected) -> None:
        assert infer_category(declared) == expected


class TestMatchResult:
    def test_download_url(self) -> None:
        assert specimen_url("Fira Code") == "https://fonts.google.com/specimen/Fira+Code"
        result = MatchResult("Open Sans", 80, "80% visual match", MatchMethod.FEATURE_SIMILARITY)
        assert result.download_url == "https://fonts.google.com/specimen/Open+Sans"

    def test_to_dict(self) -> None:
        result = MatchResult("Lora", 77, "77% visual match", MatchMethod.FEATURE_SIMILARITY,
                             category=FontCategory.SERIF, distance=0.2123456)
        data = result.to_dict()
        assert data["method"] == "feature-similarity"
        assert data["category"] == "serif"
        assert data["distance"] == 0.2123
        assert data["downloadUrl"].endswith("/Lora")


class TestFontMatcher:
    """Tests for each step of the matching cascade."""

    def test_empty_family(self, sample_catalog: FontCatalog) -> None:
        with pytest.raises(ValueError):
            matcher_for(sample_catalog).match("   ")

    def test_name_override(self, sample_catalog: FontCatalog) -> None:
        report = matcher_for(sample_catalog).match("Helvetica Neue", weight="700", style="italic")
        assert report.method is MatchMethod.NAME_OVERRIDE
        assert families(report) == [alt.family for alt in NAME_OVERRIDES["helvetica neue"]]
        assert all(alt.similarity == OVERRIDE_SIMILARITY for alt in report.alternatives)
        assert report.to_dict()["original"] == {"family": "Helvetica Neue", "weight": "700", "style": "italic"}

    def test_name_override_without_catalog(self) -> None:
        """Test curated picks are served even before a catalog exists."""
        report = matcher_for(FontCatalog()).match("Gotham")
        assert report.method is MatchMethod.NAME_OVERRIDE
        assert report.error is None
        assert len(report.alternatives) == 5

    def test_name_override_already_free(self) -> None:
        catalog = make_catalog([("Futura", FontCategory.SANS_SERIF, make_vector())])
        report = matcher_for(catalog).match("futura")
        first = report.alternatives[0]
        assert first.family == "Futura"
        assert first.similarity == EXACT_SIMILARITY
        assert first.method is MatchMethod.EXACT_MATCH
        assert first.reason.startswith("Already free")
        assert len(report.alternatives) == 6

    def test_no_database(self, sans_font_bytes: bytes) -> None:
        report = matcher_for(FontCatalog()).match("Mystery Grotesk", font_bytes=sans_font_bytes)
        assert report.method is MatchMethod.NO_DATABASE
        assert report.alternatives == []
        assert report.error == NO_CATALOG_MESSAGE
        assert report.to_dict()["error"] == NO_CATALOG_MESSAGE

    def test_exact_match(self, sample_catalog: FontCatalog) -> None:
        report = matcher_for(sample_catalog).match("roboto")
        assert report.method is MatchMethod.EXACT_MATCH
        assert families(report) == ["Roboto"]
        assert report.alternatives[0].similarity == EXACT_SIMILARITY
        assert report.features is None

    def test_exact_match_with_neighbours(self, sample_catalog: FontCatalog, sans_font_bytes: bytes) -> None:
        report = matcher_for(sample_catalog).match("Roboto", font_bytes=sans_font_bytes)
        assert report.alternatives[0].family == "Roboto"
        rest = report.alternatives[1:]
        assert len(rest) == 4
        assert "Roboto" not in [alt.family for alt in rest]
        assert all(alt.method is MatchMethod.FEATURE_SIMILARITY for alt in rest)
        assert list(report.features) == list(FEATURE_NAMES)

    @pytest.mark.parametrize(
        "declared, expected",
        [
            ("__Inter_a1b2c3", "Inter"),
            ("Inter_Fallback_0f3e2d", "Inter"),
            ("Fira", "Fira Code"),
            ("Open Sans Condensed", "Open Sans"),
        ],
    )
    def test_fuzzy_name_lookup(self, sample_catalog: FontCatalog, declared: str, expected: str) -> None:
        report = matcher_for(sample_catalog).match(declared)
        assert report.method is MatchMethod.EXACT_MATCH
        assert report.alternatives[0].family == expected

    def test_prefix_lookup_prefers_closest_length(self) -> None:
        catalog = make_catalog([
            ("Roboto Mono", FontCategory.MONOSPACE, make_vector()),
            ("Roboto", FontCategory.SANS_SERIF, make_vector()),
        ])
        assert FontMatcher.lookup_catalog_name("Robot", catalog).family == "Roboto"

    def test_short_names_skip_prefix_lookup(self, sample_catalog: FontCatalog) -> None:
        assert FontMatcher.lookup_catalog_name("Ro", sample_catalog) is None

    def test_prefix_lookup_extends_by_whole_words(self, sample_catalog: FontCatalog) -> None:
        """Test a longer query reaches a catalog name only at a word boundary."""
        assert FontMatcher.lookup_catalog_name("Inter Display", sample_catalog).family == "Inter"
        assert FontMatcher.lookup_catalog_name("Interstate", sample_catalog) is None

    def test_interstate_is_not_already_free(self, sample_catalog: FontCatalog) -> None:
        """Test a commercial family sharing a free family's first letters is not reported as free."""
        report = matcher_for(sample_catalog).match("Interstate")
        assert report.method is MatchMethod.CATEGORY_FALLBACK
        assert all(alt.similarity < 100 for alt in report.alternatives)

    def test_feature_similarity(self, sample_catalog: FontCatalog, sans_font_bytes: bytes) -> None:
        report = matcher_for(sample_catalog, top_k=3).match("Mystery Grotesk", font_bytes=sans_font_bytes)
        assert report.method is MatchMethod.FEATURE_SIMILARITY
        assert len(report.alternatives) == 3
        similarities = [alt.similarity for alt in report.alternatives]
        assert similarities == sorted(similarities, reverse=True)
        for alt in report.alternatives:
            assert alt.reason == f"{alt.similarity}% visual match"
            assert 0 <= alt.similarity <= 100
        assert report.features is not None

    def test_nearest_neighbour_is_same_family(self, sans_font_bytes: bytes) -> None:
        """Test a neighbour equal to the stripped family is promoted to an exact match."""
        vector = extract_features_from_bytes(sans_font_bytes)
        catalog = FontCatalog([
            make_record("Lora", FontCategory.SERIF, make_vector(serif_score=1.0)),
            make_record("Acme Sans", FontCategory.SANS_SERIF, vector),
            make_record("Inter", FontCategory.SANS_SERIF, make_vector()),
        ])
        matcher = matcher_for(catalog, top_k=3)
        results = matcher._feature_results("__Acme_Sans_9f8e7d6c", vector, catalog)
        assert results[0].family == "Acme Sans"
        assert results[0].method is MatchMethod.EXACT_MATCH
        assert results[0].similarity == EXACT_SIMILARITY
        assert [r.method for r in results[1:]] == [MatchMethod.FEATURE_SIMILARITY] * 2

    def test_category_fallback(self, sample_catalog: FontCatalog) -> None:
        report = matcher_for(sample_catalog).match("Mystery Mono")
        assert report.method is MatchMethod.CATEGORY_FALLBACK
        assert families(report) == ["Fira Code"]
        alt = report.alternatives[0]
        assert alt.similarity == FALLBACK_SIMILARITY
        assert alt.reason == "Category match: monospace (weak fallback)"

    def test_category_fallback_sans(self, sample_catalog: FontCatalog) -> None:
        report = matcher_for(sample_catalog, fallback_count=2).match("Mystery Sans")
        assert families(report) == ["Roboto", "Open Sans"]

    def test_category_fallback_without_keyword(self, sample_catalog: FontCatalog) -> None:
        report = matcher_for(sample_catalog).match("Lobster Two Deluxe")
        assert families(report) == ["Roboto", "Lora", "Fira Code", "Open Sans", "Pacifico"]

    def test_category_without_members_uses_whole_catalog(self) -> None:
        catalog = make_catalog([
            ("Roboto", FontCategory.SANS_SERIF, make_vector()),
            ("Pacifico", FontCategory.HANDWRITING, make_vector()),
        ])
        report = matcher_for(catalog).match("Elegant Serif Deluxe")
        assert families(report) == ["Roboto", "Pacifico"]

    def test_undecodable_bytes_fall_back(self, sample_catalog: FontCatalog) -> None:
        report = matcher_for(sample_catalog).match("Brush Deluxe", font_bytes=b"not a font")
        assert report.method is MatchMethod.CATEGORY_FALLBACK
        assert families(report) == ["Pacifico"]
        assert report.features is None
