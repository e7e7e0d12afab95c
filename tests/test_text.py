"""Tests for :mod:`jobcrawler.text` — salary, location and description normalization.

Covers :class:`TestSalaryExtraction`, :class:`TestSalaryFormatting`,
:class:`TestLocationNormalization`, :class:`TestDescriptionCleaning`,
:class:`TestHtmlAndDomain`.
"""

from __future__ import annotations

import pytest

from jobcrawler.text import (
    clean_description,
    clean_html,
    extract_domain,
    extract_salary_value,
    format_salary,
    normalize_location,
)


class TestSalaryExtraction:
    """
    REQUIREMENT: A raw salary string yields one comparable annual number.

    WHO: The sink's minimum-salary filter
    WHAT: Ranges average their two bounds; a "k" suffix multiplies by 1000;
          hourly rates are annualized at 40 h x 52 weeks; text with no
          digits yields None; the same text always yields the same value
    WHY: Boards publish pay as ranges, hourly rates and shorthand — without
         one normalized figure, a salary floor cannot be applied at all
    """

    def test_range_returns_midpoint(self) -> None:
        """
        When the text is a dollar range
        Then the mean of the two bounds is returned
        """
        assert extract_salary_value("$80,000 - $100,000") == 90_000.0

    def test_single_figure_returns_that_figure(self) -> None:
        """A single annual figure is returned unchanged."""
        assert extract_salary_value("$120,000 a year") == 120_000.0

    def test_hourly_rate_is_annualized(self) -> None:
        """
        When the text mentions an hourly rate
        Then it is multiplied by 2080 working hours
        """
        assert extract_salary_value("$25/hour") == 52_000.0

    def test_hourly_range_is_averaged_then_annualized(self) -> None:
        """A range of hourly rates averages first, then annualizes."""
        assert extract_salary_value("$40 - $60 an hour") == 50 * 2080

    def test_hr_abbreviation_counts_as_hourly(self) -> None:
        """The 'hr' abbreviation marks a rate as hourly."""
        assert extract_salary_value("$30/hr") == 30 * 2080

    def test_k_suffix_multiplies_by_thousand(self) -> None:
        """'120k - 150k' reads as 120,000 to 150,000."""
        assert extract_salary_value("$120k - $150k") == 135_000.0

    def test_uppercase_k_suffix_is_honoured(self) -> None:
        """'95K' reads as 95,000."""
        assert extract_salary_value("Up to $95K") == 95_000.0

    @pytest.mark.parametrize("text", ["$80-100K", "$80 - $100k a year", "80-100k"])
    def test_k_suffix_on_upper_bound_covers_the_range(self, text: str) -> None:
        """'80-100K' reads as 80,000 to 100,000, not 80 to 100,000."""
        assert extract_salary_value(text) == 90_000.0

    def test_k_suffix_leaves_full_figures_alone(self) -> None:
        """A bound already in the thousands is not multiplied again."""
        assert extract_salary_value("$95,000 - $120k") == 107_500.0

    def test_only_first_two_numbers_are_used(self) -> None:
        """Trailing numbers after the range do not shift the midpoint."""
        assert extract_salary_value("$80,000 - $100,000, 401k, 20 days PTO") == 90_000.0

    @pytest.mark.parametrize("text", ["", None, "Competitive", "DOE"])
    def test_text_without_digits_yields_none(self, text: str | None) -> None:
        """No digits, no salary."""
        assert extract_salary_value(text) is None

    def test_extraction_is_deterministic(self) -> None:
        """Parsing the same text twice yields the same value."""
        text = "$85,000 - $105,000 a year"
        assert extract_salary_value(text) == extract_salary_value(text)


class TestSalaryFormatting:
    """
    REQUIREMENT: Salaries print compactly in CLI output.

    WHO: The operator reading crawl results in a terminal
    WHAT: A range prints as "$low-$high"; text with no digits prints nothing
    WHY: Raw board text ("$80,000 - $100,000 a year") wastes a column
    """

    def test_range_is_compacted(self) -> None:
        assert format_salary("$80,000 - $100,000 a year") == "$80,000-$100,000"

    def test_single_value_keeps_suffix(self) -> None:
        assert format_salary("From 120k") == "$120k"

    def test_no_digits_returns_none(self) -> None:
        assert format_salary("Competitive") is None
        assert format_salary(None) is None


class TestLocationNormalization:
    """
    REQUIREMENT: Location strings from different boards compare consistently.

    WHO: Adapters (before building a listing) and the sink's location filter
    WHAT: "Remote in X" becomes "Remote (X)"; bare remote variants become
          "Remote"; "Hybrid in X" becomes "Hybrid (X)"; a "Location:" label
          is stripped; anything else is trimmed and left alone
    WHY: The same remote job reads differently on Indeed and LinkedIn;
         normalizing keeps the "contains Remote" filter reliable
    """

    def test_remote_in_region_is_parenthesized(self) -> None:
        """
        When the location is "Remote in United States"
        Then it normalizes to "Remote (United States)"
        """
        assert normalize_location("Remote in United States") == "Remote (United States)"

    @pytest.mark.parametrize("raw", ["remote", "Fully Remote", "Remote work", "100% remote"])
    def test_bare_remote_variants_collapse(self, raw: str) -> None:
        assert normalize_location(raw) == "Remote"

    def test_hybrid_in_city_is_parenthesized(self) -> None:
        assert normalize_location("Hybrid work in Austin, TX") == "Hybrid (Austin, TX)"

    def test_location_label_is_stripped(self) -> None:
        assert normalize_location("Location: Denver, CO") == "Denver, CO"

    def test_plain_city_is_trimmed_only(self) -> None:
        assert normalize_location("  New York, NY  ") == "New York, NY"

    def test_missing_location_is_empty_string(self) -> None:
        assert normalize_location(None) == ""

    def test_normalization_is_idempotent(self) -> None:
        """Normalizing an already-normalized location changes nothing."""
        once = normalize_location("Remote in Canada")
        assert normalize_location(once) == once


class TestDescriptionCleaning:
    """
    REQUIREMENT: Stored descriptions hold the job, not the boilerplate.

    WHO: The sink and anyone reading stored listings
    WHAT: Whitespace runs collapse to single spaces; a leading "About us"
          intro before the responsibilities/requirements section is
          dropped; equal-opportunity-employer sentences are dropped;
          cleaning clean text changes nothing
    WHY: Boilerplate repeats across every posting from a company and
         drowns the part that distinguishes one role from another
    """

    def test_whitespace_is_collapsed(self) -> None:
        """
        When a description contains newlines and repeated spaces
        Then they collapse to single spaces
        """
        assert clean_description("Build   APIs.\n\n  Ship\tcode.") == "Build APIs. Ship code."

    def test_company_intro_is_removed(self) -> None:
        """The 'About us' preamble before Responsibilities is dropped."""
        text = "About us We are a fast-growing startup. Responsibilities: Build APIs."
        assert clean_description(text) == "Responsibilities: Build APIs."

    def test_eeo_sentence_is_removed(self) -> None:
        """An equal-opportunity-employer sentence is dropped, the rest kept."""
        text = "Write Python daily. Acme is an equal opportunity employer. Apply now."
        assert clean_description(text) == "Write Python daily. Apply now."

    def test_cleaning_is_idempotent(self) -> None:
        """clean(clean(x)) == clean(x)."""
        text = (
            "About the company   We make widgets. Requirements: 5 years Python.  "
            "We are an Equal Employment Opportunity Employer."
        )
        once = clean_description(text)
        assert clean_description(once) == once

    def test_text_without_boilerplate_is_preserved(self) -> None:
        text = "Design distributed systems. Mentor engineers."
        assert clean_description(text) == text

    def test_empty_description_is_empty_string(self) -> None:
        assert clean_description(None) == ""
        assert clean_description("   ") == ""


class TestHtmlAndDomain:
    """
    REQUIREMENT: Markup and URLs reduce to plain, comparable values.

    WHO: Adapters reading raw markup; the CLI labelling listings by site
    WHAT: Tags are stripped and whitespace collapsed; a URL yields its
          registrable domain, or "unknown" when it has no host
    WHY: Raw markup and full URLs are noise in stored text and output
    """

    def test_tags_are_stripped(self) -> None:
        assert clean_html("<p>Build <b>APIs</b></p>\n<ul><li>Python</li></ul>") == "Build APIs Python"

    def test_domain_drops_subdomains(self) -> None:
        assert extract_domain("https://www.linkedin.com/jobs/view/123") == "linkedin.com"

    def test_bare_domain_is_returned_as_is(self) -> None:
        assert extract_domain("https://indeed.com/viewjob?jk=1") == "indeed.com"

    def test_url_without_host_is_unknown(self) -> None:
        assert extract_domain("not a url") == "unknown"
