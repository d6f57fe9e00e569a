from datetime import date

import pandas as pd
import pytest

import catalog_reports as reports
from catalog_model import ContentKind, ContentTable, ReportError
from catalog_reports import REPORTS, ReportEngine
from conftest import TODAY, make_record


def ids(result):
    return result.column("show_id")


# ============================================================================
# INDIVIDUAL REPORTS
# ============================================================================

def test_count_by_type(sample_table):
    result = reports.count_by_type(sample_table)
    assert result.columns == ["type", "count"]
    assert result.rows() == [("Movie", 4), ("TV Show", 3)]


def test_top_rating_by_type(sample_table):
    result = reports.top_rating_by_type(sample_table)
    assert result.columns == ["type", "rating"]
    assert result.rows() == [("Movie", "TV-14"), ("TV Show", "TV-MA")]


def test_top_rating_tie_keeps_first_seen_rating():
    table = ContentTable.from_records([
        make_record("a", rating="R"),
        make_record("b", rating="PG"),
        make_record("c", rating="PG"),
        make_record("d", rating="R"),
        make_record("e", ContentKind.TV_SHOW, rating=None),
    ])
    assert reports.top_rating_by_type(table).rows() == [("Movie", "R")]


def test_filter_by_year(sample_table):
    result = reports.filter_by_year(sample_table, 2021)
    assert ids(result) == ["s2", "s3"]
    assert result.shape == "records"
    assert "description" in result.columns
    assert reports.filter_by_year(sample_table, 1900).empty


def test_top_countries_counts_each_listed_country(sample_table):
    result = reports.top_countries(sample_table, n=3)
    assert result.rows() == [("India", 3), ("United States", 2), ("South Africa", 1)]


def test_top_countries_default_n(sample_table):
    assert len(reports.top_countries(sample_table)) == 4


def test_longest_movies_skips_unparsable_duration(sample_table):
    result = reports.longest_movies(sample_table)
    assert ids(result) == ["s4", "s7", "s1"]


def test_added_within_years_excludes_unparsable_dates(sample_table):
    result = reports.added_within_years(sample_table, years=2, today=TODAY)
    assert ids(result) == ["s1", "s2", "s3", "s4"]
    assert result.params == {"years": 2, "today": "2022-01-01"}


def test_added_within_years_accepts_date_objects(sample_table):
    result = reports.added_within_years(sample_table, years=1, today=date(2022, 1, 1))
    assert ids(result) == ["s1", "s2", "s3"]


def test_by_director_matches_split_names(sample_table):
    assert ids(reports.by_director(sample_table, "Rajiv Chilaka")) == ["s4", "s5"]
    assert ids(reports.by_director(sample_table, "Anurag Kashyap")) == ["s5"]
    assert reports.by_director(sample_table, "Rajiv").empty


def test_tv_shows_over_seasons(sample_table):
    assert ids(reports.tv_shows_over_seasons(sample_table, 5)) == ["s6"]
    assert ids(reports.tv_shows_over_seasons(sample_table, 1)) == ["s2", "s6"]


def test_genre_counts(sample_table):
    result = reports.genre_counts(sample_table)
    counts = dict(result.rows())
    assert counts["Documentaries"] == 2
    assert counts["International TV Shows"] == 2
    assert counts["Thrillers"] == 1
    assert sum(counts.values()) == 14


def test_top_years_by_country(sample_table):
    result = reports.top_years_by_country(sample_table, "India", n=5)
    assert result.columns == ["release_year", "count", "percentage"]
    assert result.rows() == [(2019, 1, 33.33), (2012, 1, 33.33), (2016, 1, 33.33)]


def test_top_years_by_country_rounds_half_up():
    records = [make_record("old", release_year=2000, country="Chile")]
    records += [make_record(f"m{i}", release_year=2010, country="Chile") for i in range(799)]
    result = reports.top_years_by_country(ContentTable.from_records(records), "Chile")
    assert result.rows() == [(2010, 799, 99.88), (2000, 1, 0.13)]


def test_top_years_by_country_unknown_country_is_empty(sample_table):
    result = reports.top_years_by_country(sample_table, "Atlantis")
    assert result.empty
    assert result.columns == ["release_year", "count", "percentage"]


def test_documentaries(sample_table):
    assert ids(reports.documentaries(sample_table)) == ["s1", "s7"]


def test_documentaries_checks_the_last_listed_genre():
    table = ContentTable.from_records([
        make_record("last", listed_in="Dramas, documentaries"),
        make_record("first", listed_in="Documentaries, Dramas"),
    ])
    assert ids(reports.documentaries(table)) == ["last"]


def test_missing_director(sample_table):
    assert ids(reports.missing_director(sample_table)) == ["s2", "s6", "s7"]


def test_actor_recent_movies(sample_table):
    result = reports.actor_recent_movies(sample_table, "Salman Khan", years=10, today=TODAY)
    assert ids(result) == ["s4"]
    older = reports.actor_recent_movies(sample_table, "salman khan", years=30, today=TODAY)
    assert ids(older) == ["s4", "s5", "s7"]


def test_top_actors_by_country(sample_table):
    result = reports.top_actors_by_country(sample_table, "India", n=10)
    assert result.rows() == [("Salman Khan", 2), ("Kajol", 2), ("Nawazuddin Siddiqui", 1)]
    assert len(reports.top_actors_by_country(sample_table, "India", n=1)) == 1


def test_categorize_by_keyword_default_keywords(sample_table):
    result = reports.categorize_by_keyword(sample_table)
    assert result.rows() == [("Bad", 2), ("Good", 5)]


def test_categorize_by_keyword_zero_fills(sample_table):
    result = reports.categorize_by_keyword(sample_table, ["zombie"])
    assert result.rows() == [("Bad", 0), ("Good", 7)]
    assert reports.categorize_by_keyword(sample_table, []).rows() == [("Bad", 0), ("Good", 7)]


def test_categorize_by_keyword_escapes_regex(sample_table):
    result = reports.categorize_by_keyword(sample_table, ["a.b"])
    assert dict(result.rows())["Bad"] == 0


# ============================================================================
# PROPERTIES
# ============================================================================

def test_count_by_type_sums_to_total(sample_table):
    assert sum(reports.count_by_type(sample_table).column("count")) == len(sample_table)


def test_top_rating_has_max_count_per_kind(sample_table):
    data = sample_table.data
    for kind, rating in reports.top_rating_by_type(sample_table).rows():
        counts = data.loc[data["type"] == kind, "rating"].value_counts()
        assert counts[rating] == counts.max()


@pytest.mark.parametrize("n", [0, 1, 2, 10])
def test_top_countries_length_and_order(sample_table, n):
    counts = reports.top_countries(sample_table, n=n).column("count")
    assert len(counts) <= n
    assert counts == sorted(counts, reverse=True)


def test_genre_counts_cover_every_record_with_genres(sample_table):
    assert sum(reports.genre_counts(sample_table).column("count")) >= len(sample_table)


def test_empty_genre_contributes_nothing():
    table = ContentTable.from_records([
        make_record("a", listed_in="Dramas"),
        make_record("b", listed_in=None),
        make_record("c", listed_in=" , "),
    ])
    assert reports.genre_counts(table).rows() == [("Dramas", 1)]


def test_top_years_percentages_sum_to_at_most_100(sample_table):
    percentages = reports.top_years_by_country(sample_table, "India", n=100).column("percentage")
    assert sum(percentages) <= 100.0 + 0.005 * len(percentages)
    assert sum(percentages) == pytest.approx(100.0, abs=0.01 * len(percentages))


@pytest.mark.parametrize("keywords", [None, ["kill"], ["the", "a"], ["nothing-matches"]])
def test_categories_sum_to_total(sample_table, keywords):
    assert sum(reports.categorize_by_keyword(sample_table, keywords).column("count")) == len(sample_table)


# ============================================================================
# SCENARIOS
# ============================================================================

def test_scenario_two_records(scenario_table):
    assert reports.count_by_type(scenario_table).rows() == [("Movie", 1), ("TV Show", 1)]
    assert reports.top_countries(scenario_table, 1).rows() == [("India", 2)]


def test_scenario_null_director():
    table = ContentTable.from_records([make_record("a", director=None), make_record("b", director="X")])
    assert ids(reports.missing_director(table)) == ["a"]
    for name in ["X", "None", "nan"]:
        assert "a" not in ids(reports.by_director(table, name))


def test_scenario_durations():
    table = ContentTable.from_records([
        make_record("show", ContentKind.TV_SHOW, duration="7 Seasons"),
        make_record("movie", ContentKind.MOVIE, duration="abc"),
        make_record("film", ContentKind.MOVIE, duration="95 min"),
    ])
    assert ids(reports.tv_shows_over_seasons(table, 5)) == ["show"]
    assert ids(reports.longest_movies(table)) == ["film"]


def test_every_report_handles_an_empty_table(empty_table):
    engine = ReportEngine(empty_table, verbose=False)
    params = {
        "filter_by_year": {"year": 2020},
        "by_director": {"name": "X"},
        "top_years_by_country": {"country": "India"},
        "actor_recent_movies": {"actor": "X", "today": TODAY},
        "top_actors_by_country": {"country": "India"},
    }
    for name in REPORTS:
        result = engine.run(name, **params.get(name, {}))
        if name == "categorize_by_keyword":
            assert result.rows() == [("Bad", 0), ("Good", 0)]
        else:
            assert result.empty, name


# ============================================================================
# ENGINE
# ============================================================================

def test_engine_lists_fifteen_reports():
    assert len(ReportEngine.available_reports()) == 15


def test_engine_run_passes_params(sample_table):
    engine = ReportEngine(sample_table, verbose=False)
    result = engine.run("top_countries", n=2)
    assert result.params == {"n": 2}
    assert len(result) == 2


def test_engine_ignores_none_params(sample_table):
    engine = ReportEngine(sample_table, verbose=False)
    assert len(engine.run("top_countries", n=None)) == 4


def test_engine_unknown_report(sample_table):
    with pytest.raises(ReportError, match="Unknown report"):
        ReportEngine(sample_table, verbose=False).run("box_office")


def test_engine_missing_required_param(sample_table):
    with pytest.raises(ReportError, match="missing required"):
        ReportEngine(sample_table, verbose=False).run("by_director")


def test_engine_unknown_param(sample_table):
    with pytest.raises(ReportError, match="unknown parameter"):
        ReportEngine(sample_table, verbose=False).run("count_by_type", n=3)


@pytest.mark.parametrize("bad", [-1, "ten", True, 2.5])
def test_invalid_top_n(sample_table, bad):
    with pytest.raises(ReportError):
        reports.top_countries(sample_table, n=bad)


def test_blank_name_rejected(sample_table):
    with pytest.raises(ReportError):
        reports.by_director(sample_table, "  ")


def test_bad_today_rejected(sample_table):
    with pytest.raises(ReportError):
        reports.added_within_years(sample_table, years=1, today="01/01/2022")


def test_string_params_from_config_are_coerced(sample_table):
    engine = ReportEngine(sample_table, verbose=False)
    assert ids(engine.run("filter_by_year", year="2021")) == ["s2", "s3"]


def test_run_accepts_report_parameter_called_name(sample_table):
    engine = ReportEngine(sample_table, verbose=False)
    assert ids(engine.run("by_director", name="rajiv chilaka")) == ["s4", "s5"]


def test_run_many_rejects_non_mapping_params(sample_table):
    engine = ReportEngine(sample_table, verbose=False)
    with pytest.raises(ReportError, match="params must be a mapping"):
        engine.run_many([{"name": "top_countries", "params": [5]}])


def test_run_many_keeps_request_order(sample_table):
    engine = ReportEngine(sample_table, verbose=False)
    results = engine.run_many([
        "genre_counts",
        ("top_countries", {"n": 1}),
        {"name": "by_director", "params": {"name": "Rajiv Chilaka"}},
    ])
    assert [r.name for r in results] == ["genre_counts", "top_countries", "by_director"]


def test_reports_do_not_mutate_table(sample_table):
    before = sample_table.data.copy()
    engine = ReportEngine(sample_table, verbose=False)
    engine.run("longest_movies")
    engine.run("top_years_by_country", country="India")
    pd.testing.assert_frame_equal(sample_table.data, before)
