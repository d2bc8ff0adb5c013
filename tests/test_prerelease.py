"""
Tests for reltag/prerelease.py prerelease tag derivation.
"""
import pytest

from reltag.domain.semver import SemVer, is_valid
from reltag.errors import AlreadyReleasedError, InvariantViolation
from reltag.prerelease import (
    QualifierScheme,
    matching_prerelease_tags,
    next_prerelease_tag,
    prerelease_qualifier,
)


HISTORY = [
    "0.1.0-main.0",
    "0.1.0",
    "1.0.0-main.0",
    "1.0.0-branch-feature.0",
    "1.0.0",
    "1.0.1-main.0",
    "1.0.1",
    "2.0.0-main.0",
    "2.0.0",
    "2.0.1-main.0",
    "2.1.0-main.0",
    "2.1.0",
]

OLD_HISTORY = HISTORY + [
    "2.3.0-main.0",
    "2.4.0",
    "2.4.1-main.0",
    "2.4.1",
]

CURRENT = HISTORY + [
    "2.1.1-main.0",
    "2.1.1-1",
    "2.1.1-branch-feature.0",
    "2.1.1-branch-feature.1",
    "2.1.1-branch-feature.2",
    "2.1.1-branch-feature.3",
    "2.1.1-main.2",
]


class TestNextPrereleaseTag:
    """Tests for next_prerelease_tag with the branch-qualified scheme."""

    def test_first_prerelease_without_tags(self):
        tag = next_prerelease_tag(
            branch="main", default_branch="main", next_release_version="0.1.0", tags=[]
        )
        assert tag == "0.1.0-main.0"

    def test_first_prerelease_without_matching_tags(self):
        tag = next_prerelease_tag(
            branch="main", default_branch="main", next_release_version="2.4.6", tags=OLD_HISTORY
        )
        assert tag == "2.4.6-main.0"

    def test_increments_existing_prerelease(self):
        """Gaps are not filled; the highest counter is incremented."""
        tag = next_prerelease_tag(
            branch="main", default_branch="main", next_release_version="2.1.1", tags=CURRENT
        )
        assert tag == "2.1.1-main.3"

    def test_first_branch_prerelease(self):
        tag = next_prerelease_tag(
            branch="big/changes_in-store@s",
            default_branch="main",
            next_release_version="2.1.1",
            tags=CURRENT,
        )
        assert tag == "2.1.1-branch-big-changes-in-stores.0"

    def test_increments_existing_branch_prerelease(self):
        tag = next_prerelease_tag(
            branch="feature", default_branch="main", next_release_version="2.1.1", tags=CURRENT
        )
        assert tag == "2.1.1-branch-feature.4"

    def test_tag_order_does_not_matter(self):
        tags = list(reversed(CURRENT))
        tag = next_prerelease_tag(
            branch="main", default_branch="main", next_release_version="2.1.1", tags=tags
        )
        assert tag == "2.1.1-main.3"

    def test_counters_compare_numerically(self):
        tags = ["3.0.0-main.9", "3.0.0-main.10", "3.0.0-main.2"]
        tag = next_prerelease_tag(
            branch="main", default_branch="main", next_release_version="3.0.0", tags=tags
        )
        assert tag == "3.0.0-main.11"

    def test_already_released(self):
        with pytest.raises(AlreadyReleasedError) as exc_info:
            next_prerelease_tag(
                branch="main", default_branch="main", next_release_version="2.1.0", tags=CURRENT
            )
        assert exc_info.value.version == "2.1.0"
        assert "2.1.0" in str(exc_info.value)

    def test_already_released_is_invariant_violation(self):
        with pytest.raises(InvariantViolation):
            next_prerelease_tag(
                branch="feature", default_branch="main", next_release_version="1.0.0", tags=HISTORY
            )

    def test_ignores_non_semver_tags(self):
        tags = ["nightly", "v2.1.1-main.7", "release-2.1.1", "2.1.1-main.01", "2.1.1-main.0"]
        tag = next_prerelease_tag(
            branch="main", default_branch="main", next_release_version="2.1.1", tags=tags
        )
        assert tag == "2.1.1-main.1"

    def test_ignores_other_branches(self):
        """A branch whose name is a prefix of another never picks up its tags."""
        tags = ["1.0.0-branch-feat.0", "1.0.0-branch-feature.5", "1.0.0-branch-feat-x.3"]
        tag = next_prerelease_tag(
            branch="feat", default_branch="main", next_release_version="1.0.0", tags=tags
        )
        assert tag == "1.0.0-branch-feat.1"

    def test_default_branch_not_confused_with_branch_named_like_it(self):
        tags = ["1.0.0-branch-main.4"]
        tag = next_prerelease_tag(
            branch="main", default_branch="main", next_release_version="1.0.0", tags=tags
        )
        assert tag == "1.0.0-main.0"

    def test_regex_characters_in_version_are_literal(self):
        """The dots in the release version must not match any character."""
        tags = ["2x1y1-main.5", "2.1.1-main.0"]
        tag = next_prerelease_tag(
            branch="main", default_branch="main", next_release_version="2.1.1", tags=tags
        )
        assert tag == "2.1.1-main.1"

    @pytest.mark.parametrize("padded", ["1.0.0-main.5\n", " 1.0.0-main.5", "1.0.0-main.5\t"])
    def test_tags_with_surrounding_whitespace_ignored(self, padded):
        """Only tags of exactly <release>-<qualifier>.<n> count."""
        tag = next_prerelease_tag(
            branch="main", default_branch="main", next_release_version="1.0.0", tags=[padded]
        )
        assert tag == "1.0.0-main.0"

    def test_dotted_branch_name(self):
        tags = ["1.0.0-branch-release.2.0.0", "1.0.0-branch-release.2.0.1"]
        tag = next_prerelease_tag(
            branch="release.2.0", default_branch="main", next_release_version="1.0.0", tags=tags
        )
        assert tag == "1.0.0-branch-release.2.0.2"

    def test_accepts_any_iterable(self):
        tag = next_prerelease_tag(
            branch="main",
            default_branch="main",
            next_release_version="2.1.1",
            tags=(t for t in CURRENT),
        )
        assert tag == "2.1.1-main.3"

    @pytest.mark.parametrize("branch", ["main", "feature", "fix/login_page", "dependabot/npm/x-1.2"])
    def test_result_is_new_and_highest(self, branch):
        """The result is valid, unused and above every matching tag."""
        tags = list(CURRENT)
        for _ in range(5):
            tag = next_prerelease_tag(
                branch=branch, default_branch="main", next_release_version="2.1.1", tags=tags
            )
            assert is_valid(tag)
            assert tag not in tags
            assert SemVer.parse(tag).release == "2.1.1"
            for existing in matching_prerelease_tags(branch, "main", "2.1.1", tags):
                assert SemVer.parse(tag) > SemVer.parse(existing)
            tags.append(tag)


class TestSimpleScheme:
    """Tests for next_prerelease_tag with the simple scheme."""

    def test_default_branch_has_no_qualifier(self):
        tag = next_prerelease_tag(
            branch="main",
            default_branch="main",
            next_release_version="2.1.1",
            tags=CURRENT,
            scheme=QualifierScheme.SIMPLE,
        )
        assert tag == "2.1.1-2"

    def test_default_branch_first(self):
        tag = next_prerelease_tag(
            branch="main", default_branch="main", next_release_version="0.1.0", tags=[],
            scheme="simple",
        )
        assert tag == "0.1.0-0"

    def test_branch_uses_sanitized_name(self):
        tags = ["2.1.1-feature.0", "2.1.1-branch-feature.7"]
        tag = next_prerelease_tag(
            branch="feature", default_branch="main", next_release_version="2.1.1", tags=tags,
            scheme="simple",
        )
        assert tag == "2.1.1-feature.1"

    def test_unknown_scheme(self):
        with pytest.raises(ValueError, match="branch-qualified"):
            next_prerelease_tag(
                branch="main", default_branch="main", next_release_version="1.0.0", tags=[],
                scheme="fancy",
            )


class TestPrereleaseQualifier:
    """Tests for prerelease_qualifier and QualifierScheme."""

    @pytest.mark.parametrize("branch,scheme,expected", [
        ("main", QualifierScheme.BRANCH_QUALIFIED, "main"),
        ("feature/x", QualifierScheme.BRANCH_QUALIFIED, "branch-feature-x"),
        ("main", QualifierScheme.SIMPLE, ""),
        ("feature/x", QualifierScheme.SIMPLE, "feature-x"),
    ])
    def test_qualifier(self, branch, scheme, expected):
        assert prerelease_qualifier(branch, "main", scheme) == expected

    def test_default_branch_is_sanitized(self):
        assert prerelease_qualifier("release/v2", "release/v2") == "release-v2"

    def test_scheme_parse(self):
        assert QualifierScheme.parse(" Simple ") is QualifierScheme.SIMPLE
        assert QualifierScheme.parse(QualifierScheme.SIMPLE) is QualifierScheme.SIMPLE
        assert QualifierScheme.parse("branch-qualified") is QualifierScheme.BRANCH_QUALIFIED


class TestMatchingPrereleaseTags:
    """Tests for matching_prerelease_tags."""

    def test_highest_first(self):
        result = matching_prerelease_tags("feature", "main", "2.1.1", CURRENT)
        assert result == [
            "2.1.1-branch-feature.3",
            "2.1.1-branch-feature.2",
            "2.1.1-branch-feature.1",
            "2.1.1-branch-feature.0",
        ]

    def test_duplicates_dropped(self):
        result = matching_prerelease_tags("main", "main", "1.0.0", ["1.0.0-main.0", "1.0.0-main.0"])
        assert result == ["1.0.0-main.0"]

    def test_no_match(self):
        assert matching_prerelease_tags("main", "main", "9.9.9", CURRENT) == []
